import logging
from dataclasses import dataclass
from typing import Callable, List


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    level: str = "error"


Subscriber = Callable[[Notification], None]


class NotificationChannel:
    """
    One-way sink for user-visible messages.

    Emitters never wait on, or hear back from, the surface that displays
    them. Every notification is also kept in ``events`` so callers without
    a UI can inspect what was emitted.
    """

    def __init__(self):
        self.events: List[Notification] = []
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def emit(self, message: str, level: str = "error") -> None:
        notification = Notification(message=message, level=level)
        self.events.append(notification)
        logger.debug("Notification (%s): %s", level, message)

        for subscriber in list(self._subscribers):
            try:
                subscriber(notification)
            except Exception:
                # Subscribers cannot fail an emit
                logger.exception("Notification subscriber failed")

    def error(self, message: str) -> None:
        self.emit(message, "error")

    @property
    def messages(self) -> List[str]:
        return [n.message for n in self.events]
