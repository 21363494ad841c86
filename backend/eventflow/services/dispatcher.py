"""
Notification fan-out.

DELIVERY CONTRACT
=================

  - One message per recipient, all sends issued concurrently
  - Each send has its own timeout, so one slow recipient cannot hold the
    batch past the request deadline
  - A failed or timed-out send is logged and counted, never retried and
    never raised: at-most-once, best-effort
  - "delivered" means the mail provider accepted the message, not that it
    reached an inbox
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from eventflow.core.logging import get_logger
from eventflow.core.metrics import record_notification_send
from eventflow.services.interfaces.mailer import Mailer, MailMessage

logger = get_logger(__name__)

DEFAULT_SEND_TIMEOUT = 10.0


@dataclass
class SendFailure:
    recipient: str
    error: str


@dataclass
class DispatchReport:
    attempted: int = 0
    delivered: int = 0
    failures: list[SendFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class NotificationDispatcher:

    def __init__(self, mailer: Mailer, send_timeout: float = DEFAULT_SEND_TIMEOUT):
        self.mailer = mailer
        self.send_timeout = send_timeout

    async def _send_one(self, recipient: str, render: Callable[[str], MailMessage], kind: str) -> bool:
        started = time.perf_counter()
        try:
            message = render(recipient)
            message_id = await asyncio.wait_for(self.mailer.send(message), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            record_notification_send(kind, False, time.perf_counter() - started)
            logger.error(
                "notification_send_failed",
                kind=kind,
                recipient=recipient,
                error=f"timed out after {self.send_timeout}s",
            )
            raise
        except Exception as e:
            record_notification_send(kind, False, time.perf_counter() - started)
            logger.error("notification_send_failed", kind=kind, recipient=recipient, error=str(e))
            raise

        record_notification_send(kind, True, time.perf_counter() - started)
        logger.info("notification_sent", kind=kind, recipient=recipient, message_id=message_id)
        return True

    async def dispatch(
        self,
        recipients: list[str],
        render: Callable[[str], MailMessage],
        kind: str,
    ) -> DispatchReport:
        """
        Send one rendered message to each recipient.

        Args:
            recipients: Email addresses, one send each
            render: Builds the message for a recipient
            kind: Metrics/log label (subscriber, organizer, ...)
        """
        report = DispatchReport(attempted=len(recipients))
        if not recipients:
            return report

        results = await asyncio.gather(
            *(self._send_one(recipient, render, kind) for recipient in recipients),
            return_exceptions=True,
        )

        for recipient, result in zip(recipients, results):
            if isinstance(result, BaseException):
                error = str(result) or type(result).__name__
                report.failures.append(SendFailure(recipient=recipient, error=error))
            else:
                report.delivered += 1

        logger.info(
            "notification_batch_completed",
            kind=kind,
            attempted=report.attempted,
            delivered=report.delivered,
            failed=report.failed,
        )
        return report
