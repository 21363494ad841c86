"""
Profile model. Carries the retention record used by the GDPR job.

The id is the identity provider's user id; deleting an account removes
the events, this row and the identity, in that order.
"""

from sqlalchemy import Column, DateTime, String, Uuid

from eventflow.db.base import Base, TimestampMixin


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    last_active_at = Column(DateTime(timezone=True), nullable=True)
    retention_warning_sent_at = Column(DateTime(timezone=True), nullable=True)
    retention_extended_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email})>"
