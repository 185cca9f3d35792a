"""
User notification collaborator.

The core never branches on a notification; it only reports at well-defined
points (end of orchestration, end of a pipeline run). LoggingNotifier logs
each notification and keeps a bounded history so an editor plugin can poll
it over HTTP.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Protocol, Sequence

from .errors import ErrorFormatter

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget notification surface"""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def show_attempt_details(self, attempts: Sequence) -> None: ...


@dataclass
class Notification:
    """A notification delivered to the user"""
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class LoggingNotifier:
    """
    Notifier that writes to the log and remembers recent notifications.

    Args:
        max_history: Number of notifications to keep
    """

    def __init__(self, max_history: int = 100):
        self.history: Deque[Notification] = deque(maxlen=max_history)
        self.last_attempts: List = []
        self.last_attempt_details: Optional[str] = None

    def info(self, message: str) -> None:
        logger.info(message)
        self.history.append(Notification("info", message))

    def warning(self, message: str) -> None:
        logger.warning(message)
        self.history.append(Notification("warning", message))

    def error(self, message: str) -> None:
        logger.error(message)
        self.history.append(Notification("error", message))

    def show_attempt_details(self, attempts: Sequence) -> None:
        """Render the failover attempt log and keep it for later inspection"""
        self.last_attempts = list(attempts)
        self.last_attempt_details = ErrorFormatter.format_attempt_details(attempts)
        logger.info(self.last_attempt_details)
        self.history.append(Notification("details", self.last_attempt_details))

    def recent(self, limit: Optional[int] = None) -> List[Notification]:
        """Most recent notifications, oldest first; a non-positive limit returns none"""
        items = list(self.history)
        if limit is None:
            return items
        return items[-limit:] if limit > 0 else []
