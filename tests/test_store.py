from app.client.state import ConversationState, Draft, ImageAttachment, MessageStore
from tests.helpers import make_message


class TestMessageStore:

    def test_replace_all_swaps_contents(self):
        store = MessageStore()
        store.append(make_message(1))
        store.replace_all([make_message(5), make_message(3)])
        assert [m.id for m in store] == [5, 3]

    def test_append_adds_to_end(self):
        store = MessageStore()
        store.replace_all([make_message(2)])
        store.append(make_message(1))
        assert [m.id for m in store] == [2, 1]

    def test_clear(self):
        store = MessageStore()
        store.replace_all([make_message(1), make_message(2)])
        store.clear()
        assert len(store) == 0

    def test_contains_by_id(self):
        store = MessageStore()
        store.append(make_message(9))
        assert 9 in store
        assert 10 not in store

    def test_listeners_fire_on_every_mutation(self):
        store = MessageStore()
        seen = []
        unsubscribe = store.subscribe(lambda: seen.append(len(store)))

        store.replace_all([make_message(1)])
        store.append(make_message(2))
        store.clear()
        unsubscribe()
        store.append(make_message(3))

        assert seen == [1, 2, 0]

    def test_failing_listener_does_not_block_mutation(self):
        store = MessageStore()
        seen = []

        def broken():
            raise RuntimeError("render failed")

        store.subscribe(broken)
        store.subscribe(lambda: seen.append(len(store)))

        store.append(make_message(1))

        assert [m.id for m in store] == [1]
        assert seen == [1]

    def test_messages_is_a_snapshot(self):
        store = MessageStore()
        store.append(make_message(1))
        snapshot = store.messages
        store.append(make_message(2))
        assert len(snapshot) == 1


class TestDraft:

    def test_empty(self):
        assert Draft().is_empty
        assert not Draft(text="x").is_empty
        assert not Draft(image=ImageAttachment("a.png", b"1")).is_empty

    def test_clear(self):
        draft = Draft(text="x", image=ImageAttachment("a.png", b"1"))
        draft.clear()
        assert draft.text == "" and draft.image is None


def test_conversation_state_current():
    state = ConversationState(peer_id=2, generation=3)
    assert state.is_current(2, 3)
    assert not state.is_current(2, 2)
    assert not state.is_current(4, 3)
