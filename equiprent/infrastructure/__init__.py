"""
Infrastructure Layer - Store backends and housekeeping.

- database: document store backends (in-memory, SQLAlchemy)
- storage: object store backends and the orphan attachment cleaner
- integrity: link integrity checker
"""
