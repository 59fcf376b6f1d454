from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from app.client.directory import ConnectionsDirectory
from app.client.models import Message, Participant
from app.client.state import ConversationState


@dataclass(frozen=True)
class RenderedMessage:
    message: Message
    outgoing: bool

    @property
    def alignment(self) -> str:
        return "end" if self.outgoing else "start"


@dataclass(frozen=True)
class RenderedConversation:
    peer: Participant
    messages: Tuple[RenderedMessage, ...]


def chronological(messages: Iterable[Message]) -> List[Message]:
    # sorted() is stable: equal timestamps keep arrival order
    return sorted(messages, key=lambda m: m.created_at)


def is_outgoing(message: Message, peer_id: int) -> bool:
    """Anything addressed to the open peer is ours, whoever the sender is."""
    return message.to_user_id == peer_id


class ConversationView:
    """
    Read-only projection of a conversation's store.

    Renders nothing until the peer's profile is known. Whenever a store
    mutation changes the rendered list, ``scroll_to`` is called with the
    newest message.
    """

    def __init__(
        self,
        state: ConversationState,
        directory: ConnectionsDirectory,
        scroll_to: Optional[Callable[[Message], None]] = None,
    ):
        self.state = state
        self.directory = directory
        self.scroll_to = scroll_to
        self.scrolled_to: Optional[int] = None
        self._rendered_ids: Tuple[int, ...] = ()
        self._unsubscribe = state.store.subscribe(self._on_store_change)

    def render(self) -> Optional[RenderedConversation]:
        peer = self.directory.get(self.state.peer_id)
        if peer is None:
            return None

        return RenderedConversation(
            peer=peer,
            messages=tuple(
                RenderedMessage(message=m, outgoing=is_outgoing(m, peer.id))
                for m in chronological(self.state.store)
            ),
        )

    def close(self) -> None:
        self._unsubscribe()

    def _on_store_change(self) -> None:
        ordered = chronological(self.state.store)
        ids = tuple(m.id for m in ordered)
        if ids == self._rendered_ids:
            return

        self._rendered_ids = ids
        if not ordered:
            self.scrolled_to = None
            return

        newest = ordered[-1]
        self.scrolled_to = newest.id
        if self.scroll_to is not None:
            self.scroll_to(newest)
