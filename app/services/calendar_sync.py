"""
Best-effort push of reservation events to an external calendar webhook.

Runs after the reservation transaction has committed and the room lock is
released. Failures are logged and never reach the caller.
"""

import logging
from typing import Optional

import httpx

from app.domain import Reservation, User

logger = logging.getLogger(__name__)


class CalendarSync:
    def __init__(self, webhook_url: Optional[str] = None, timeout_s: float = 3.0, client: Optional[httpx.Client] = None):
        self.webhook_url = webhook_url
        self.timeout_s = timeout_s
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def reservation_created(self, reservation: Reservation, user: User) -> bool:
        return self._push("reservation.created", reservation, user)

    def reservation_cancelled(self, reservation: Reservation, user: User) -> bool:
        return self._push("reservation.cancelled", reservation, user)

    def _push(self, event: str, reservation: Reservation, user: User) -> bool:
        if not self.enabled:
            return False
        payload = {
            "event": event,
            "reservation_id": reservation.id,
            "room_id": reservation.room_id,
            "attendee": user.email,
            "start_at": reservation.start_at.isoformat(),
            "end_at": reservation.end_at.isoformat(),
            "status": reservation.status.value,
        }
        try:
            if self._client is not None:
                response = self._client.post(self.webhook_url, json=payload, timeout=self.timeout_s)
            else:
                with httpx.Client(timeout=self.timeout_s) as client:
                    response = client.post(self.webhook_url, json=payload)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "calendar_sync_failed",
                extra={
                    "event": event,
                    "reservation_id": reservation.id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return False
        logger.info("Calendar event %s sent for reservation %s", event, reservation.id)
        return True
