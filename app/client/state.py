import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from app.client.models import Message


logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class MessageStore:
    """
    Messages of the conversation that is currently open.

    No ordering is imposed here; the view sorts at render time. Listeners
    are called after every mutation.
    """

    def __init__(self):
        self._messages: List[Message] = []
        self._listeners: List[Listener] = []

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __contains__(self, message_id: object) -> bool:
        return any(m.id == message_id for m in self._messages)

    def replace_all(self, messages: Iterable[Message]) -> None:
        self._messages = list(messages)
        self._changed()

    def append(self, message: Message) -> None:
        self._messages.append(message)
        self._changed()

    def clear(self) -> None:
        self._messages = []
        self._changed()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                # A broken listener cannot undo a mutation
                logger.exception("Message store listener failed")


@dataclass(frozen=True)
class ImageAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class Draft:
    text: str = ""
    image: Optional[ImageAttachment] = None

    @property
    def is_empty(self) -> bool:
        return not self.text and self.image is None

    def clear(self) -> None:
        self.text = ""
        self.image = None


class SyncStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


@dataclass
class ConversationState:
    """Per-conversation state owned by the sync controller and shared by handle."""

    peer_id: Optional[int] = None
    status: SyncStatus = SyncStatus.IDLE
    generation: int = 0
    store: MessageStore = field(default_factory=MessageStore)
    draft: Draft = field(default_factory=Draft)

    def is_current(self, peer_id: Optional[int], generation: int) -> bool:
        return self.peer_id == peer_id and self.generation == generation
