from eventflow.schemas.event import EventIdRequest, ModerationRequestResponse, NotifyResponse
from eventflow.schemas.retention import RetentionRunResponse
from eventflow.schemas.subscription import SubscriptionCreate, SubscriptionResponse

__all__ = [
    "EventIdRequest", "ModerationRequestResponse", "NotifyResponse",
    "RetentionRunResponse",
    "SubscriptionCreate", "SubscriptionResponse",
]
