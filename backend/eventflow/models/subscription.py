"""
Newsletter subscription with optional match filters.

Filters are plain strings; an empty value or the sentinel "all" means the
filter is not applied. See eventflow.services.matching.
"""

import uuid

from sqlalchemy import Column, DateTime, String, Uuid, func

from eventflow.db.base import Base


class NewsletterSubscription(Base):
    __tablename__ = "newsletter_subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    category_filter = Column(String(100), nullable=True)
    location_filter = Column(String(255), nullable=True)
    keyword_filter = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<NewsletterSubscription(id={self.id}, email={self.email})>"
