"""
Table-level data access used by the Database coordinator.

Each repository exposes static methods taking an open aiosqlite connection.
"""
