"""
Client and server wired together in-process.

The client talks to the FastAPI app through httpx's ASGI transport, so
every hop (gate, multipart parsing, persistence, envelope mapping) is
the real one.
"""
import httpx
import pytest

from app.client.api import MessagingApi
from app.client.session import ChatSession
from app.client.state import ImageAttachment


def session_for(api_app, token, scrolled=None):
    transport = httpx.ASGITransport(app=api_app)
    client = httpx.AsyncClient(transport=transport, base_url="http://test")
    api = MessagingApi(base_url="http://test", client=client)

    async def get_token():
        return token

    scroll = (lambda m: scrolled.append(m.id)) if scrolled is not None else None
    return ChatSession(api, get_token, scroll_to=scroll)


@pytest.mark.asyncio
async def test_conversation_round_trip(api_app, users, tokens):
    alice = session_for(api_app, tokens["alice"])
    bob_scrolled = []
    bob = session_for(api_app, tokens["bob"], bob_scrolled)

    await alice.open(users["bob"])
    assert alice.render() is None

    alice.state.draft.text = "hi bob"
    sent = await alice.send()
    assert sent.text == "hi bob"
    assert alice.state.draft.text == ""
    assert [m.id for m in alice.state.store] == [sent.id]

    alice.state.draft.image = ImageAttachment("cat.png", b"png", "image/png")
    photo = await alice.send()
    assert photo.message_type == "image"
    assert photo.media_url.endswith("cat.png")

    await bob.directory.refresh(bob.api, bob.get_token, bob.notifications)
    await bob.open(users["alice"])

    rendered = bob.render()
    assert rendered.peer.username == "alice"
    assert [r.message.id for r in rendered.messages] == [sent.id, photo.id]
    assert [r.outgoing for r in rendered.messages] == [False, False]
    assert bob_scrolled == [photo.id]

    bob.state.draft.text = "hey"
    reply = await bob.send()
    assert bob.render().messages[-1].message == reply
    assert bob.render().messages[-1].outgoing is True
    assert bob_scrolled == [photo.id, reply.id]

    await alice.api.aclose()
    await bob.api.aclose()


@pytest.mark.asyncio
async def test_server_rejection_reaches_notifications(api_app, users, tokens):
    alice = session_for(api_app, tokens["alice"])
    await alice.open(999)

    alice.state.draft.text = "anyone?"
    assert await alice.send() is None

    assert alice.notifications.messages == ["Recipient not found"]
    assert alice.state.draft.text == "anyone?"
    assert len(alice.state.store) == 0
    await alice.api.aclose()


@pytest.mark.asyncio
async def test_bad_token_is_reported_not_raised(api_app, users):
    stranger = session_for(api_app, "not-a-token")

    await stranger.open(users["alice"])
    stranger.state.draft.text = "hello"
    await stranger.send()

    assert stranger.notifications.messages == [
        "Request failed with status code 401",
        "Message could not be sent. Please try again.",
    ]
    await stranger.api.aclose()
