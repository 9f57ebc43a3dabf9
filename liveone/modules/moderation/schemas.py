"""Pydantic schemas for the moderation domain (ban records, requests, responses)."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from liveone.modules.security.content import strip_tags

MAX_REASON_LENGTH = 500


class BanRecord(BaseModel):
    id: Optional[int] = None
    user_id: str
    admin_id: Optional[str] = None
    reason: Optional[str] = None
    banned_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


# ----------------------------------------------------------------- requests


class _UserIdRequest(BaseModel):
    user_id: str = Field(min_length=1)

    model_config = ConfigDict(
        str_strip_whitespace=True, coerce_numbers_to_str=True, extra="ignore"
    )


class CheckBanStatusRequest(_UserIdRequest):
    pass


class BanInfoRequest(_UserIdRequest):
    pass


class UnbanUserRequest(_UserIdRequest):
    admin_id: str = Field(min_length=1)


class BanUserRequest(_UserIdRequest):
    admin_id: str = Field(min_length=1)
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def _clean_reason(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = strip_tags(value).strip()
        if len(cleaned) > MAX_REASON_LENGTH:
            raise ValueError(f"reason must be at most {MAX_REASON_LENGTH} characters")
        return cleaned or None


class AddModeratorsRequest(BaseModel):
    admin_id: str = Field(min_length=1)

    model_config = ConfigDict(
        str_strip_whitespace=True, coerce_numbers_to_str=True, extra="ignore"
    )


# ---------------------------------------------------------------- responses


class CheckBanStatusResponse(BaseModel):
    is_banned: bool


class BannedBy(BaseModel):
    id: Optional[str] = None
    username: str

    @model_serializer(mode="wrap")
    def _omit_missing_id(self, handler):
        # The "System" issuer has no account and is rendered as just its name.
        data = handler(self)
        if data.get("id") is None:
            data.pop("id", None)
        return data


class BanInfo(BaseModel):
    user_id: str
    banned_until: datetime
    reason: str
    banned_by: BannedBy


class BanInfoResponse(BaseModel):
    ban_info: Optional[BanInfo] = None


class BannedUserOut(BaseModel):
    id: str
    email: Optional[str] = None
    username: str
    avatar_url: Optional[str] = None
    banned_until: datetime


class BannedUsersResponse(BaseModel):
    banned_users: List[BannedUserOut]


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class BanOut(BanRecord):
    banned_until: datetime


class BanUserResponse(ActionResponse):
    ban: BanOut


class ModeratorGrantResult(BaseModel):
    email: str
    success: bool
    action: Optional[str] = None
    error: Optional[str] = None


class AddModeratorsResponse(BaseModel):
    success: bool = True
    results: List[ModeratorGrantResult]
