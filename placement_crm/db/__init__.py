"""
Database module - engine handle, unit of work and table metadata.
"""
from placement_crm.db.database import Database, get_db, unit_of_work
from placement_crm.db.tables import metadata

__all__ = [
    "Database",
    "get_db",
    "unit_of_work",
    "metadata",
]
