"""Builders and fakes shared by the client-side tests."""
from datetime import datetime, timedelta

from app.client.models import Message


BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


def make_message(id, from_user_id=1, to_user_id=2, text="hello", created_at=None, **extra):
    if created_at is None:
        created_at = BASE_TIME + timedelta(seconds=id)
    elif isinstance(created_at, int):
        created_at = BASE_TIME + timedelta(seconds=created_at)
    return Message(
        id=id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        text=text,
        created_at=created_at,
        **extra,
    )


class FakeApi:
    """
    Scripted stand-in for MessagingApi.

    ``history`` maps peer id to the list returned (or the exception
    raised) by fetch_history; ``send_result`` is returned or raised by
    send_message. Calls are recorded.
    """

    def __init__(self, history=None, send_result=None):
        self.history = history or {}
        self.send_result = send_result
        self.history_calls = []
        self.send_calls = []
        self.gates = {}

    async def fetch_history(self, token, peer_id):
        self.history_calls.append((token, peer_id))
        gate = self.gates.get(peer_id)
        if gate is not None:
            await gate.wait()
        result = self.history.get(peer_id, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def send_message(self, token, peer_id, text, image=None):
        self.send_calls.append((token, peer_id, text, image))
        if isinstance(self.send_result, Exception):
            raise self.send_result
        return self.send_result


async def static_token():
    return "token-123"


