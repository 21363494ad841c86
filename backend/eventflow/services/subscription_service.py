"""
Newsletter subscription creation.
"""

from typing import Optional

from eventflow.core.logging import get_logger
from eventflow.models.subscription import NewsletterSubscription
from eventflow.services.interfaces.stores import SubscriptionStore

logger = get_logger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SubscriptionService:

    def __init__(self, subscriptions: SubscriptionStore):
        self.subscriptions = subscriptions

    async def subscribe(
        self,
        email: str,
        category_filter: Optional[str] = None,
        location_filter: Optional[str] = None,
        keyword_filter: Optional[str] = None,
    ) -> NewsletterSubscription:
        """
        Register a subscriber.
        Raises SubscriptionConflict if the email is already subscribed.
        """
        subscription = NewsletterSubscription(
            email=email.strip().lower(),
            category_filter=_clean(category_filter),
            location_filter=_clean(location_filter),
            keyword_filter=_clean(keyword_filter),
        )
        try:
            created = await self.subscriptions.add(subscription)
        except Exception as e:
            logger.warning("subscription_failed", email=subscription.email, error=type(e).__name__)
            raise

        logger.info("subscription_created", subscription_id=str(created.id), email=created.email)
        return created
