from eventflow.models.event import ApprovalAction, ApprovalState, Event
from eventflow.models.profile import Profile
from eventflow.models.subscription import NewsletterSubscription

__all__ = [
    "ApprovalAction", "ApprovalState", "Event",
    "Profile", "NewsletterSubscription",
]
