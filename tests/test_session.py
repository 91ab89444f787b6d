"""Tests for per-browser sessions and the session store."""

from server.assistant.session import Session, SessionStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _config(**overrides) -> dict:
    config = {
        "max_turns": 3,
        "max_tokens_budget": 8000,
        "idle_timeout_s": 60,
        "max_sessions": 10,
    }
    config.update(overrides)
    return config


# ── Session ──────────────────────────────────────────────────────

def test_history_keeps_order() -> None:
    session = Session("abc", _config())
    session.add_user_message("Hallo")
    session.add_assistant_message("Hallo! Wie geht es dir?")

    assert session.get_messages() == [
        {"role": "user", "content": "Hallo"},
        {"role": "assistant", "content": "Hallo! Wie geht es dir?"},
    ]


def test_history_trimmed_to_max_turns() -> None:
    session = Session("abc", _config(max_turns=2))
    for i in range(5):
        session.add_user_message(f"q{i}")
        session.add_assistant_message(f"a{i}")

    contents = [m["content"] for m in session.get_messages()]
    assert contents == ["q3", "a3", "q4", "a4"]


def test_history_trimmed_to_token_budget() -> None:
    session = Session("abc", _config(max_turns=50, max_tokens_budget=10))
    session.add_user_message("x" * 40)
    session.add_assistant_message("y" * 40)
    session.add_user_message("short")
    session.add_assistant_message("reply")

    contents = [m["content"] for m in session.get_messages()]
    assert contents == ["short", "reply"]


def test_get_messages_returns_copy() -> None:
    session = Session("abc", _config())
    session.add_user_message("hi")
    session.get_messages().clear()
    assert len(session.history) == 1


def test_invalid_limits_fall_back_to_defaults() -> None:
    session = Session("abc", {"max_turns": "lots", "max_tokens_budget": None})
    session.add_user_message("hi")
    assert session.get_messages() == [{"role": "user", "content": "hi"}]


# ── SessionStore ─────────────────────────────────────────────────

def test_new_session_without_id() -> None:
    store = SessionStore(_config(), clock=FakeClock())
    session = store.get_or_create(None)

    assert session.id
    assert len(store) == 1


def test_existing_session_is_reused() -> None:
    store = SessionStore(_config(), clock=FakeClock())
    first = store.get_or_create(None)
    first.add_user_message("hi")

    again = store.get_or_create(first.id)

    assert again is first
    assert len(store) == 1


def test_unknown_id_starts_fresh_session() -> None:
    store = SessionStore(_config(), clock=FakeClock())
    session = store.get_or_create("forged-id")

    assert session.id != "forged-id"
    assert session.get_messages() == []


def test_sessions_are_isolated() -> None:
    store = SessionStore(_config(), clock=FakeClock())
    a = store.get_or_create(None)
    b = store.get_or_create(None)
    a.add_user_message("secret")

    assert a.id != b.id
    assert b.get_messages() == []


def test_idle_session_is_evicted() -> None:
    clock = FakeClock()
    store = SessionStore(_config(idle_timeout_s=60), clock=clock)
    session = store.get_or_create(None)
    session.add_user_message("hi")

    clock.now += 61

    assert store.get(session.id) is None
    assert session.get_messages() == []
    assert len(store) == 0


def test_activity_extends_session_lifetime() -> None:
    clock = FakeClock()
    store = SessionStore(_config(idle_timeout_s=60), clock=clock)
    session = store.get_or_create(None)

    clock.now += 50
    store.get_or_create(session.id)
    clock.now += 50

    assert store.get(session.id) is session


def test_evict_idle_reports_count() -> None:
    clock = FakeClock()
    store = SessionStore(_config(idle_timeout_s=60), clock=clock)
    store.get_or_create(None)
    store.get_or_create(None)

    clock.now += 120

    assert store.evict_idle() == 2
    assert store.evict_idle() == 0


def test_max_sessions_evicts_least_recently_active() -> None:
    clock = FakeClock()
    store = SessionStore(_config(max_sessions=2), clock=clock)
    oldest = store.get_or_create(None)
    clock.now += 1
    newer = store.get_or_create(None)
    clock.now += 1
    store.get_or_create(None)

    assert store.get(oldest.id) is None
    assert store.get(newer.id) is newer
    assert len(store) == 2


def test_drop_clears_history() -> None:
    store = SessionStore(_config(), clock=FakeClock())
    session = store.get_or_create(None)
    session.add_user_message("hi")

    assert store.drop(session.id) is True
    assert session.get_messages() == []
    assert store.drop(session.id) is False
