"""
User model untuk SQL backend.
"""

from sqlalchemy import Column, String, Boolean, Integer, JSON

from filescrud.db.base import Base
from filescrud.schemas.user import User as UserRecord


class User(Base):
    """
    User table.

    Attributes:
        u_id: Surrogate primary key
        u_username: Username (unique, bisa di-rename)
        u_hash_version: Versi strategi hashing
        u_salt: Password salt
        u_hash: Password hash
        u_owner_id: Owner ID stabil (UUID string)
        u_admin: Administrator flag
        u_meta: Metadata aplikasi (JSON)
    """

    __tablename__ = "users"

    u_id = Column(Integer, primary_key=True, autoincrement=True)
    u_username = Column(String(255), unique=True, nullable=False, index=True)
    u_hash_version = Column(String(32), nullable=False)
    u_salt = Column(String(255), nullable=False)
    u_hash = Column(String(255), nullable=False)
    u_owner_id = Column(String(36), unique=True, nullable=False)
    u_admin = Column(Boolean, default=False, nullable=False)
    u_meta = Column(JSON, nullable=False, default=dict)

    @classmethod
    def from_record(cls, user: UserRecord) -> "User":
        return cls(
            u_username=user.username,
            u_hash_version=user.hash_version,
            u_salt=user.salt,
            u_hash=user.hash,
            u_owner_id=user.owner_id,
            u_admin=user.admin,
            u_meta=dict(user.meta)
        )

    def to_record(self) -> UserRecord:
        """Convert ke domain record."""
        return UserRecord(
            username=self.u_username,
            hash_version=self.u_hash_version,
            salt=self.u_salt,
            hash=self.u_hash,
            owner_id=self.u_owner_id,
            admin=bool(self.u_admin),
            meta=self.u_meta or {}
        )
