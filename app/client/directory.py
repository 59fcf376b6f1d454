import logging
from typing import Dict, Iterable, List, Optional

from app.client.api import MessagingApi, TokenProvider, acquire_token
from app.client.errors import MessagingError
from app.client.models import Participant
from app.client.notifications import NotificationChannel


logger = logging.getLogger(__name__)


class ConnectionsDirectory:
    """Profiles keyed by user id. Lookups are synchronous; refresh is not."""

    def __init__(self, participants: Iterable[Participant] = ()):
        self._by_id: Dict[int, Participant] = {}
        self.update(participants)

    def update(self, participants: Iterable[Participant]) -> None:
        self._by_id = {p.id: p for p in participants}

    def get(self, user_id: Optional[int]) -> Optional[Participant]:
        if user_id is None:
            return None
        return self._by_id.get(user_id)

    def __len__(self) -> int:
        return len(self._by_id)

    @property
    def participants(self) -> List[Participant]:
        return list(self._by_id.values())

    async def refresh(
        self,
        api: MessagingApi,
        get_token: TokenProvider,
        notifications: NotificationChannel,
    ) -> bool:
        try:
            token = await acquire_token(get_token)
            participants = await api.fetch_connections(token)
        except MessagingError as e:
            notifications.error(e.message)
            return False

        self.update(participants)
        logger.debug("Directory refreshed with %d connections", len(participants))
        return True
