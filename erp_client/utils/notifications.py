# erp_client/utils/notifications.py
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal

from ..config import NOTIFICATION_HISTORY_LIMIT
from ..constants import COLOR_ERROR, COLOR_INFO, COLOR_SUCCESS, COLOR_WARNING

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    color: str


class Notifier(QObject):
    """
    Process-wide notification bus (the toast channel).

    Anything user-visible goes through here as (title, message, color);
    views subscribe to `notified`, tests read `history`.
    """

    notified = Signal(str, str, str)

    def __init__(self, parent: QObject | None = None, history_limit: int = NOTIFICATION_HISTORY_LIMIT):
        super().__init__(parent)
        self._history: deque[Notification] = deque(maxlen=history_limit)

    @property
    def history(self) -> list[Notification]:
        return list(self._history)

    @property
    def last(self) -> Notification | None:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()

    def notify(self, title: str, message: str, color: str = COLOR_INFO) -> None:
        note = Notification(title, message, color)
        self._history.append(note)
        level = logging.ERROR if color == COLOR_ERROR else logging.INFO
        _log.log(level, "%s: %s", title, message)
        self.notified.emit(title, message, color)

    def success(self, title: str, message: str) -> None:
        self.notify(title, message, COLOR_SUCCESS)

    def info(self, title: str, message: str) -> None:
        self.notify(title, message, COLOR_INFO)

    def warning(self, title: str, message: str) -> None:
        self.notify(title, message, COLOR_WARNING)

    def error(self, title: str, message: str) -> None:
        self.notify(title, message, COLOR_ERROR)
