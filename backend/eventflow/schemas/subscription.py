"""
Pydantic schemas for newsletter subscriptions.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class SubscriptionCreate(BaseModel):
    email: EmailStr
    category_filter: Optional[str] = Field(None, max_length=100)
    location_filter: Optional[str] = Field(None, max_length=255)
    keyword_filter: Optional[str] = Field(None, max_length=500)


class SubscriptionResponse(BaseModel):
    id: uuid.UUID
    email: str
    category_filter: Optional[str]
    location_filter: Optional[str]
    keyword_filter: Optional[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
