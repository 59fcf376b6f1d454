import logging
from typing import Optional

from app.client.api import MessagingApi, TokenProvider, acquire_token
from app.client.errors import ApplicationRejection, TokenAcquisitionFailure, TransportFailure
from app.client.models import Message
from app.client.notifications import NotificationChannel
from app.client.state import ConversationState, ImageAttachment


logger = logging.getLogger(__name__)

SEND_FAILED = "Message could not be sent. Please try again."


class SendPipeline:
    """
    One delivery attempt per call, never retried.

    On success the server's copy of the message is appended to the store
    and the draft is cleared. On any failure the draft is left untouched
    and a notification is emitted.
    """

    def __init__(
        self,
        api: MessagingApi,
        get_token: TokenProvider,
        notifications: NotificationChannel,
        state: ConversationState,
    ):
        self.api = api
        self.get_token = get_token
        self.notifications = notifications
        self.state = state

    async def send(
        self,
        peer_id: int,
        text: str,
        image: Optional[ImageAttachment] = None,
    ) -> Optional[Message]:
        if not text and image is None:
            return None

        generation = self.state.generation

        try:
            token = await acquire_token(self.get_token)
            message = await self.api.send_message(token, peer_id, text, image)
        except TokenAcquisitionFailure as e:
            self.notifications.error(e.message)
            return None
        except ApplicationRejection as e:
            self.notifications.error(e.message)
            return None
        except TransportFailure as e:
            logger.warning("Send to %s failed: %s", peer_id, e.message)
            self.notifications.error(SEND_FAILED)
            return None

        # The user may have switched conversations while the request ran
        if self.state.is_current(peer_id, generation):
            self.state.draft.clear()
            if message.id not in self.state.store:
                self.state.store.append(message)

        return message

    async def send_draft(self) -> Optional[Message]:
        """What the send button and the Enter key trigger."""
        if self.state.peer_id is None:
            return None
        draft = self.state.draft
        return await self.send(self.state.peer_id, draft.text, draft.image)
