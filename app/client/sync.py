import logging
from typing import Optional

from app.client.api import MessagingApi, TokenProvider, acquire_token
from app.client.errors import MessagingError
from app.client.models import Message
from app.client.notifications import NotificationChannel
from app.client.state import ConversationState, SyncStatus


logger = logging.getLogger(__name__)


class ConversationSync:
    """
    Drives the open conversation: IDLE -> LOADING -> READY -> IDLE.

    Each open() bumps ``state.generation``. A history fetch only lands in
    the store if the generation it started under is still current when it
    completes; anything older is dropped silently.
    """

    def __init__(
        self,
        api: MessagingApi,
        get_token: TokenProvider,
        notifications: NotificationChannel,
        state: Optional[ConversationState] = None,
    ):
        self.api = api
        self.get_token = get_token
        self.notifications = notifications
        self.state = state or ConversationState()

    @property
    def store(self):
        return self.state.store

    async def open(self, peer_id: int) -> None:
        state = self.state
        if state.peer_id is not None:
            self._teardown()

        state.generation += 1
        generation = state.generation
        state.peer_id = peer_id
        state.status = SyncStatus.LOADING
        logger.debug("Opening conversation with %s (generation %d)", peer_id, generation)

        try:
            token = await acquire_token(self.get_token)
            messages = await self.api.fetch_history(token, peer_id)
        except MessagingError as e:
            if not state.is_current(peer_id, generation):
                return
            self.notifications.error(e.message)
            state.status = SyncStatus.READY
            return

        if not state.is_current(peer_id, generation):
            logger.debug("Discarding stale history for %s (generation %d)", peer_id, generation)
            return

        state.store.replace_all(messages)
        state.status = SyncStatus.READY

    def close(self) -> None:
        """View unmounted: forget the conversation."""
        if self.state.peer_id is None and self.state.status is SyncStatus.IDLE:
            return
        self._teardown()

    def receive(self, message: Message) -> bool:
        """
        Fold in a message that arrived from outside (live push).
        Only messages of the open conversation that are not already
        present are appended.
        """
        peer_id = self.state.peer_id
        if peer_id is None or not message.involves(peer_id):
            return False
        if message.id in self.state.store:
            return False

        self.state.store.append(message)
        return True

    def _teardown(self) -> None:
        state = self.state
        logger.debug("Closing conversation with %s", state.peer_id)
        state.generation += 1
        state.peer_id = None
        state.status = SyncStatus.IDLE
        state.store.clear()
        state.draft.clear()
