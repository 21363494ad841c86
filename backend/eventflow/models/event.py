"""
Event model with an explicit three-way approval state.

Key design decisions:
- `approval_state` is a real enum (pending/approved/rejected) rather than a
  nullable boolean, so "not approved" can never be mistaken for "rejected"
- start < end is validated when an event is submitted, not by the table
- Index on (approval_state, start_datetime) serves the public listing of
  approved upcoming events
"""

import enum
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, Index, Numeric, String, Text, Uuid,
)

from eventflow.db.base import Base, TimestampMixin


class ApprovalState(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def target_state(self) -> ApprovalState:
        if self is ApprovalAction.APPROVE:
            return ApprovalState.APPROVED
        return ApprovalState.REJECTED


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    start_datetime = Column(DateTime(timezone=True), nullable=False)
    end_datetime = Column(DateTime(timezone=True), nullable=False)

    organizer_id = Column(Uuid, nullable=False, index=True)
    organizer_email = Column(String(255), nullable=True)
    organizer_description = Column(Text, nullable=True)

    is_free = Column(Boolean, nullable=False, default=False)
    price_adults = Column(Numeric(10, 2), nullable=True)
    price_kids = Column(Numeric(10, 2), nullable=True)
    price_students = Column(Numeric(10, 2), nullable=True)
    price_seniors = Column(Numeric(10, 2), nullable=True)
    image_url = Column(String(1024), nullable=True)

    approval_state = Column(
        Enum(
            ApprovalState,
            name="approval_state",
            native_enum=False,
            length=20,
            values_callable=lambda states: [s.value for s in states],
        ),
        nullable=False,
        default=ApprovalState.PENDING,
    )

    __table_args__ = (
        Index("ix_events_approval_start", "approval_state", "start_datetime"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, state={self.approval_state})>"
