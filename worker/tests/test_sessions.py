from audionotes.models.live import BeginEvent
from audionotes.services.sessions import SessionStore


def test_create_get_remove():
    store = SessionStore()
    a = store.create()
    b = store.create()
    assert a.session_id != b.session_id
    assert store.get(a.session_id) is a
    assert len(store) == 2
    store.remove(a)
    assert store.get(a.session_id) is None
    assert store.list() == [b]


def test_rekey_follows_provider_session_id():
    store = SessionStore()
    s = store.create("local")
    s.apply(BeginEvent(type="Begin", id="provider-1"))
    store.rekey(s)
    assert store.get("local") is None
    assert store.get("provider-1") is s
    store.remove(s)
    assert len(store) == 0


def test_rekey_does_not_clobber_existing_session():
    store = SessionStore()
    taken = store.create("provider-1")
    s = store.create("local")
    s.apply(BeginEvent(type="Begin", id="provider-1"))
    store.rekey(s)
    assert store.get("provider-1") is taken
    assert store.get("local") is s


def test_sessions_are_isolated():
    store = SessionStore()
    a, b = store.create(), store.create()
    a.handle_message({"type": "Turn", "turn_order": 0, "end_of_turn": True, "transcript": "only a"})
    assert a.full_transcript() == "only a"
    assert b.full_transcript() == ""
