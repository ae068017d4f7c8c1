"""
Base model untuk SQLAlchemy.
Semua model SQL backend inherit dari Base.
"""

from sqlalchemy import inspect
from sqlalchemy.orm import as_declarative


@as_declarative()
class Base:
    """
    Base class untuk semua SQLAlchemy models.
    Menggunakan @as_declarative untuk membuat declarative base.
    """

    def __repr__(self) -> str:
        # Jangan tampilkan kolom selain primary key (salt, hash, key material)
        class_name = self.__class__.__name__
        primary_keys = [
            f"{column.name}={getattr(self, column.name)}"
            for column in inspect(self.__class__).primary_key
        ]
        if primary_keys:
            return f"<{class_name}({', '.join(primary_keys)})>"
        return f"<{class_name}>"
