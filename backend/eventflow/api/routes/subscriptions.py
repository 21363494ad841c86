"""
Newsletter subscription endpoint.
"""

from fastapi import APIRouter, Depends, status

from eventflow.api.dependencies import get_subscription_service
from eventflow.schemas.subscription import SubscriptionCreate, SubscriptionResponse
from eventflow.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    data: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Subscribe to new-event alerts. A duplicate email returns 409."""
    return await service.subscribe(
        email=data.email,
        category_filter=data.category_filter,
        location_filter=data.location_filter,
        keyword_filter=data.keyword_filter,
    )
