"""Database modules"""

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.db.supabase import get_database

__all__ = [
    "DatabaseInterface",
    "get_database",
]
