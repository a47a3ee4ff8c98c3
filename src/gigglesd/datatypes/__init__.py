"""Shared data structures: Discord ID wrappers, link-edit types and guild settings."""
