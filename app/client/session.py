from typing import Callable, Optional

from app.client.api import MessagingApi, TokenProvider
from app.client.directory import ConnectionsDirectory
from app.client.models import Message
from app.client.notifications import NotificationChannel
from app.client.send import SendPipeline
from app.client.state import ConversationState
from app.client.sync import ConversationSync
from app.client.view import ConversationView


class ChatSession:
    """Wires one conversation screen: state, sync, send and view share one state object."""

    def __init__(
        self,
        api: MessagingApi,
        get_token: TokenProvider,
        directory: Optional[ConnectionsDirectory] = None,
        notifications: Optional[NotificationChannel] = None,
        scroll_to: Optional[Callable[[Message], None]] = None,
    ):
        self.api = api
        self.get_token = get_token
        self.directory = directory or ConnectionsDirectory()
        self.notifications = notifications or NotificationChannel()
        self.state = ConversationState()

        self.sync = ConversationSync(api, get_token, self.notifications, self.state)
        self.sender = SendPipeline(api, get_token, self.notifications, self.state)
        self.view = ConversationView(self.state, self.directory, scroll_to=scroll_to)

    async def open(self, peer_id: int) -> None:
        await self.sync.open(peer_id)

    def close(self) -> None:
        self.sync.close()

    async def send(self) -> Optional[Message]:
        return await self.sender.send_draft()

    def render(self):
        return self.view.render()
