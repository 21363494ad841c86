"""
Signed, time-limited approval tokens.

TOKEN FORMAT
============

  payload   = "{action}:{event_id}:{expires_at_epoch_millis}"
  signature = base64(HMAC-SHA256(secret, payload))
  token     = base64("{payload}:{signature}")

A token is a bearer capability: whoever holds the link in the moderation
email may approve or reject that one event until it expires. Verification
needs only the token, the secret and the clock. Nothing is stored, so
a token can be redeemed more than once; see TokenLedger for the optional
single-use check.

Checks run in a fixed order and the first failure wins:
  format -> action -> event id -> expiry -> signature
"""

import base64
import binascii
import hashlib
import hmac
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from eventflow.core.exceptions import (
    TokenBadSignature,
    TokenError,
    TokenExpired,
    TokenInvalidAction,
    TokenInvalidEventId,
    TokenInvalidFormat,
)
from eventflow.core.logging import get_logger
from eventflow.core.metrics import record_token_verification
from eventflow.core.timeutils import (
    Clock, from_epoch_millis, is_uuid, to_epoch_millis, utcnow,
)
from eventflow.models.event import ApprovalAction

logger = get_logger(__name__)

DEFAULT_TOKEN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class ApprovalClaim:
    action: ApprovalAction
    event_id: uuid.UUID
    expires_at: datetime
    signature: str


class ApprovalTokenCodec:
    """Issues and verifies approval tokens with a dedicated signing key."""

    def __init__(
        self,
        secret: str,
        default_ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Clock = utcnow,
    ):
        if not secret:
            raise ValueError("approval token secret must not be empty")
        self._key = secret.encode("utf-8")
        self._default_ttl = default_ttl
        self._clock = clock

    @property
    def default_ttl(self) -> timedelta:
        return self._default_ttl

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def issue(
        self,
        action: ApprovalAction,
        event_id: uuid.UUID,
        ttl: Optional[timedelta] = None,
    ) -> str:
        action = ApprovalAction(action)
        lifetime = self._default_ttl if ttl is None else ttl
        expires_at = to_epoch_millis(self._clock() + lifetime)

        payload = f"{action.value}:{event_id}:{expires_at}"
        token = f"{payload}:{self._sign(payload)}"
        return base64.b64encode(token.encode("utf-8")).decode("ascii")

    def verify(self, token: str) -> ApprovalClaim:
        """
        Decode and authenticate a token.

        Raises:
            TokenInvalidFormat, TokenInvalidAction, TokenInvalidEventId,
            TokenExpired, TokenBadSignature
        """
        try:
            claim = self._verify(token)
        except TokenError as exc:
            record_token_verification(exc.error_code.lower().replace("token_", ""))
            logger.warning("approval_token_rejected", reason=exc.error_code)
            raise
        record_token_verification("ok")
        return claim

    def _verify(self, token: str) -> ApprovalClaim:
        try:
            decoded = base64.b64decode(token, validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            raise TokenInvalidFormat()

        parts = decoded.split(":")
        if len(parts) != 4:
            raise TokenInvalidFormat()
        raw_action, raw_event_id, raw_expiry, signature = parts

        try:
            action = ApprovalAction(raw_action)
        except ValueError:
            raise TokenInvalidAction()

        if not is_uuid(raw_event_id):
            raise TokenInvalidEventId()

        # Plain ASCII digits only; int() alone would take " 1", "+1" and "1_000"
        if not (raw_expiry.isascii() and raw_expiry.isdigit()):
            raise TokenInvalidFormat()
        expires_millis = int(raw_expiry)

        if to_epoch_millis(self._clock()) > expires_millis:
            raise TokenExpired()

        expected = self._sign(f"{raw_action}:{raw_event_id}:{raw_expiry}")
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            raise TokenBadSignature()

        return ApprovalClaim(
            action=action,
            event_id=uuid.UUID(raw_event_id),
            expires_at=from_epoch_millis(expires_millis),
            signature=signature,
        )
