"""
Pydantic schemas for moderation and notification requests/responses.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class EventIdRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: uuid.UUID = Field(..., alias="eventId")


class NotifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    notified_count: int = Field(..., alias="notifiedCount")
    matched_count: int = Field(..., alias="matchedCount")
    failed_count: int = Field(..., alias="failedCount")


class ModerationRequestResponse(BaseModel):
    success: bool
    recipient: str
