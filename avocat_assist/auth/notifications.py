"""
Transient user notifications (the toasts of the web front-end).

A shell subscribes with a listener to render them; every notification is
also logged and the most recent ones are kept in `history` for inspection.
"""

import logging
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, Optional

from pydantic import BaseModel, Field

from avocat_assist.api.models import utc_now
from avocat_assist.config.config import settings

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=utc_now)


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.WARNING,
}


class Notifier:
    """
    Collects notifications and forwards them to an optional listener.

    Parameters
    ----------
    listener : callable, optional
        Called with every new notification.
    history_limit : int, optional
        Number of notifications kept in `history`; older ones are dropped.
        Defaults to `settings.NOTIFICATION_HISTORY_LIMIT`.
    """

    def __init__(
        self,
        listener: Optional[Callable[[Notification], None]] = None,
        history_limit: Optional[int] = None,
    ):
        self.listener = listener
        limit = history_limit if history_limit is not None else settings.NOTIFICATION_HISTORY_LIMIT
        self.history: Deque[Notification] = deque(maxlen=limit)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.history.append(notification)
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, message)
        if self.listener is not None:
            self.listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def warning(self, message: str) -> Notification:
        return self.notify(NotificationLevel.WARNING, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
