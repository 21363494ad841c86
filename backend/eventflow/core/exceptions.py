"""
Domain exceptions.

Every error raised by the services derives from EventFlowError and carries
a stable error_code plus a message that is safe to show to end users.
The HTTP mapping lives in eventflow.api.errors.
"""

from typing import Optional


class EventFlowError(Exception):
    error_code = "EVENTFLOW_ERROR"
    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, **details):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.error_code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


# Approval tokens

class TokenError(EventFlowError):
    error_code = "TOKEN_INVALID"
    message = "This approval link is invalid"


class TokenInvalidFormat(TokenError):
    error_code = "TOKEN_INVALID_FORMAT"


class TokenInvalidAction(TokenError):
    error_code = "TOKEN_INVALID_ACTION"


class TokenInvalidEventId(TokenError):
    error_code = "TOKEN_INVALID_EVENT_ID"


class TokenBadSignature(TokenError):
    error_code = "TOKEN_BAD_SIGNATURE"


class TokenExpired(TokenError):
    error_code = "TOKEN_EXPIRED"
    message = "This approval link has expired"


# Records and input

class RecordNotFound(EventFlowError):
    error_code = "RECORD_NOT_FOUND"
    message = "Record not found"


class ValidationError(EventFlowError):
    error_code = "VALIDATION_ERROR"
    message = "Invalid request"


class SubscriptionConflict(EventFlowError):
    error_code = "SUBSCRIPTION_CONFLICT"
    message = "This email address is already subscribed"


# Infrastructure

class TransportFailure(EventFlowError):
    error_code = "TRANSPORT_FAILURE"
    message = "Failed to reach an external service"


class StoreFailure(EventFlowError):
    error_code = "STORE_FAILURE"
    message = "Failed to read or write data"
