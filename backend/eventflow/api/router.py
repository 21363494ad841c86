"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from eventflow.api.routes import approval, notifications, retention, subscriptions

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(approval.router)
api_router.include_router(notifications.router)
api_router.include_router(retention.router)
api_router.include_router(subscriptions.router)
