"""
JWT signing key model untuk SQL backend.
Urutan insert (jk_id) menentukan key aktif: key terakhir dipakai untuk signing.
"""

from sqlalchemy import Column, Integer, Text

from filescrud.db.base import Base


class JwtKey(Base):
    """JWT signing keys table (append-only)."""

    __tablename__ = "jwt_keys"

    jk_id = Column(Integer, primary_key=True, autoincrement=True)
    jk_key = Column(Text, nullable=False)
