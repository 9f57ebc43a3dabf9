"""Pydantic schemas for the notification read-marker."""

from pydantic import BaseModel, ConfigDict, Field


class MarkNotificationReadRequest(BaseModel):
    notification_id: str = Field(min_length=1)

    model_config = ConfigDict(
        str_strip_whitespace=True, coerce_numbers_to_str=True, extra="ignore"
    )


class MarkNotificationReadResponse(BaseModel):
    success: bool = True
