import json
import logging
from typing import Optional

import websockets

from app.client.api import TokenProvider, acquire_token
from app.client.errors import MessagingError
from app.client.models import Message
from app.client.notifications import NotificationChannel
from app.client.sync import ConversationSync
from app.core.config import settings


logger = logging.getLogger(__name__)


def socket_url(base_url: str, token: str) -> str:
    if base_url.startswith("https://"):
        base_url = "wss://" + base_url[len("https://"):]
    elif base_url.startswith("http://"):
        base_url = "ws://" + base_url[len("http://"):]
    return f"{base_url.rstrip('/')}/api/message/ws?token={token}"


class LiveFeed:
    """Feeds messages pushed by the server into the open conversation."""

    def __init__(
        self,
        sync: ConversationSync,
        get_token: TokenProvider,
        notifications: NotificationChannel,
        base_url: Optional[str] = None,
        connect=websockets.connect,
    ):
        self.sync = sync
        self.get_token = get_token
        self.notifications = notifications
        self.base_url = base_url or settings.API_BASE_URL
        self._connect = connect

    def handle(self, raw) -> bool:
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug("Ignoring non-JSON frame")
            return False

        if not isinstance(payload, dict) or payload.get("type") != "message":
            return False

        try:
            message = Message.model_validate(payload.get("message"))
        except ValueError:
            logger.warning("Ignoring malformed message push")
            return False

        return self.sync.receive(message)

    async def run(self) -> None:
        """Listen until the server closes the socket."""
        try:
            token = await acquire_token(self.get_token)
        except MessagingError as e:
            self.notifications.error(e.message)
            return

        try:
            async with self._connect(socket_url(self.base_url, token)) as ws:
                async for raw in ws:
                    self.handle(raw)
        except (OSError, websockets.exceptions.WebSocketException) as e:
            logger.warning("Live feed closed: %s", e)
