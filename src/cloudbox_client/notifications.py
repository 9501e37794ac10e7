import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 4.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    NEUTRAL = "neutral"


@dataclass
class Notification:
    id: int
    message: str
    kind: NotificationKind
    created_at: datetime


class Notifier:
    """Collects user-facing confirmations; every entry is also logged.

    Entries expire `ttl_seconds` after they were posted unless dismissed earlier.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or _utcnow
        self._ids = itertools.count(1)
        self._active: List[Notification] = []

    def _prune(self) -> None:
        cutoff = self._clock() - self.ttl
        self._active = [n for n in self._active if n.created_at > cutoff]

    def notify(self, message: str, kind: NotificationKind = NotificationKind.SUCCESS) -> Notification:
        self._prune()
        notification = Notification(id=next(self._ids), message=message, kind=kind, created_at=self._clock())
        self._active.append(notification)
        if kind == NotificationKind.ERROR:
            logger.warning(message)
        else:
            logger.info(message)
        return notification

    def dismiss(self, notification_id: int) -> None:
        self._active = [n for n in self._active if n.id != notification_id]

    @property
    def active(self) -> List[Notification]:
        self._prune()
        return list(self._active)
