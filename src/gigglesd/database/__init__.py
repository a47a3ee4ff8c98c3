"""
Database package for GigglesD.

Public API:
    - database: Global Database instance
    - get_db: Get the global Database instance
    - Database: Main database management class
"""
