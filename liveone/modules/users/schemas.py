"""Pydantic schemas for identities and profiles as returned by the backend."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserIdentity(BaseModel):
    """Identity record owned by the managed auth store."""

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    is_online: bool = False
    banned_until: Optional[datetime] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("user_metadata", mode="before")
    @classmethod
    def _metadata_or_empty(cls, value):
        return value or {}

    @field_validator("is_online", mode="before")
    @classmethod
    def _online_or_false(cls, value):
        return bool(value)


class ProfileRecord(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("role", mode="before")
    @classmethod
    def _role_or_user(cls, value):
        return value or "user"
