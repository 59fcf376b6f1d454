import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from app.client.errors import ApplicationRejection, TokenAcquisitionFailure, TransportFailure
from app.client.models import Message, Participant
from app.client.state import ImageAttachment
from app.core.config import settings


logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]


async def acquire_token(get_token: TokenProvider) -> str:
    """Fresh bearer token from the identity provider, or TokenAcquisitionFailure."""
    try:
        token = await get_token()
    except Exception as e:
        raise TokenAcquisitionFailure(str(e) or "Could not obtain an access token") from e

    if not token:
        raise TokenAcquisitionFailure("Not signed in")
    return token


class MessagingApi:
    """
    HTTP client for the direct-message endpoints.

    Every call either returns the decoded payload of a ``success: true``
    envelope or raises TransportFailure / ApplicationRejection.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, token: str, **kwargs) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}"}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportFailure("Network error: could not reach the server") from e

        if response.is_error:
            logger.warning("%s %s returned %s", method, path, response.status_code)
            raise TransportFailure(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportFailure("Invalid response from server", response.status_code) from e

        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            raise ApplicationRejection(message if isinstance(message, str) and message else "Request was rejected")

        return data

    @staticmethod
    def _parse(model, raw):
        try:
            return model.model_validate(raw)
        except ValueError as e:
            raise TransportFailure("Invalid response from server") from e

    async def fetch_history(self, token: str, peer_id: int) -> List[Message]:
        data = await self._request("POST", "/api/message/get", token, json={"to_user_id": peer_id})
        return [self._parse(Message, m) for m in data.get("messages") or []]

    async def send_message(
        self,
        token: str,
        peer_id: int,
        text: str,
        image: Optional[ImageAttachment] = None,
    ) -> Message:
        # Always multipart: scalar parts carry no filename
        parts = [
            ("to_user_id", (None, str(peer_id).encode())),
            ("text", (None, (text or "").encode())),
        ]
        if image is not None:
            parts.append(("image", (image.filename, image.content, image.content_type)))

        data = await self._request("POST", "/api/message/send", token, files=parts)

        return self._parse(Message, data.get("message"))

    async def fetch_connections(self, token: str) -> List[Participant]:
        data = await self._request("GET", "/api/user/connections", token)
        return [self._parse(Participant, p) for p in data.get("connections") or []]
