"""
Document-store layer for file metadata.

Contains the SQLite JSON-document adapter used for local development, the
MongoDB adapter used in production, and the document schemas both validate
against.
"""

from .local import get_nosql_adapter, init_db
from .mongo_adapter import MongoAdapter
from .nosql_adapter import NoSQLAdapter
from .schemas import FILES_COLLECTION

__all__ = [
    'get_nosql_adapter', 'init_db',
    'MongoAdapter', 'NoSQLAdapter',
    'FILES_COLLECTION',
]
