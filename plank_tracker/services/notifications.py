"""
Notifications
=============

User-facing messages collected while serving a request, returned to the
client alongside the response.
"""

import threading
from dataclasses import asdict, dataclass
from typing import List


@dataclass(frozen=True)
class Notification:
    level: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class Notifier:
    """Thread-safe collector of notifications."""

    def __init__(self):
        self._lock = threading.Lock()
        self._items: List[Notification] = []

    def _push(self, level: str, message: str) -> None:
        with self._lock:
            self._items.append(Notification(level, message))

    def error(self, message: str) -> None:
        self._push("error", message)

    def success(self, message: str) -> None:
        self._push("success", message)

    def info(self, message: str) -> None:
        self._push("info", message)

    @property
    def items(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    def errors(self) -> List[Notification]:
        return [n for n in self.items if n.level == "error"]

    def drain(self) -> List[Notification]:
        """Return and forget everything collected so far."""
        with self._lock:
            items, self._items = self._items, []
        return items
