"""
Database module untuk Files-CRUD Auth.
Berisi persistence contract, scoped acquisition, dan SQLAlchemy base.
Backend konkret ada di filescrud.db.memory, filescrud.db.sql, dan filescrud.db.redis_store;
pilih lewat filescrud.db.factory.create_persistence.
"""

from filescrud.db.base import Base
from filescrud.db.interface import Database
from filescrud.db.session import (
    DatabaseFactory,
    database_scope,
    create_engine,
    create_session_factory,
    init_db,
    close_db
)

__all__ = [
    "Base",
    "Database",
    "DatabaseFactory",
    "database_scope",
    "create_engine",
    "create_session_factory",
    "init_db",
    "close_db"
]
