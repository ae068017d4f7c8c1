"""
User schemas untuk Files-CRUD Auth.
Berisi domain record yang dipertukarkan dengan backend persistence
dan response schema untuk API.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    Identity record.

    Attributes:
        username: Unique key, dipakai sebagai foreign key di tempat lain
        hash_version: Tag strategi hashing yang menghasilkan salt/hash
        salt: Salt dari strategi tersebut
        hash: Hash dari strategi tersebut
        owner_id: UUID stabil, di-assign saat pembuatan dan tidak pernah dipakai ulang
        admin: Flag administrator
        meta: Metadata bebas yang didefinisikan aplikasi
    """
    model_config = ConfigDict(from_attributes=True)

    username: str
    hash_version: str
    salt: str
    hash: str
    owner_id: str
    admin: bool = False
    meta: Dict[str, Any] = Field(default_factory=dict)


class FailedLoginAttempts(BaseModel):
    """
    Counter percobaan login gagal per username.
    """
    model_config = ConfigDict(from_attributes=True)

    username: str
    attempts: int = Field(0, ge=0)
    last_attempt: Optional[datetime] = None


class UserResponse(BaseModel):
    """
    User response schema tanpa credential fields.
    """
    username: str = Field(..., description="Username")
    owner_id: str = Field(..., description="Stable owner ID")
    admin: bool = Field(False, description="Administrator flag")
    meta: Dict[str, Any] = Field(default_factory=dict, description="User metadata")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            username=user.username,
            owner_id=user.owner_id,
            admin=user.admin,
            meta=user.meta
        )
