import logging
from typing import Optional, Protocol

_log = logging.getLogger(__name__)

SUCCESS = 'success'
ERROR = 'error'
INFO = 'info'


class NotificationSink(Protocol):
    def notify(self, message: str, severity: str = INFO, duration_ms: Optional[int] = None) -> None:
        ...


class LoggingNotificationSink:
    """Writes toasts to the log; used when no UI is attached."""

    def notify(self, message: str, severity: str = INFO, duration_ms: Optional[int] = None) -> None:
        level = logging.WARNING if severity == ERROR else logging.INFO
        _log.log(level, f"[{severity}] {message}")
