import pytest

from verifyai.exceptions import SessionNotFoundError
from verifyai.services.session_store import SessionStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestSessionStore:
    def test_create_get_delete(self, clock):
        store = SessionStore(clock=clock)
        session = store.create()
        assert store.get(session.id) is session
        store.delete(session.id)
        assert len(store) == 0
        with pytest.raises(SessionNotFoundError):
            store.get(session.id)

    def test_idle_sessions_expire(self, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        stale = store.create()
        clock.now = 30
        fresh = store.create()

        clock.now = 70
        with pytest.raises(SessionNotFoundError):
            store.get(stale.id)
        assert store.get(fresh.id) is fresh
        assert len(store) == 1

    def test_access_keeps_session_alive(self, clock):
        store = SessionStore(ttl_seconds=60, clock=clock)
        session = store.create()
        for clock.now in (50, 100, 150):
            assert store.get(session.id) is session

    def test_least_recently_used_evicted_at_capacity(self, clock):
        store = SessionStore(max_sessions=2, clock=clock)
        first = store.create()
        clock.now = 1
        second = store.create()
        clock.now = 2
        store.get(first.id)

        clock.now = 3
        third = store.create()
        assert len(store) == 2
        assert store.get(first.id) is first
        assert store.get(third.id) is third
        with pytest.raises(SessionNotFoundError):
            store.get(second.id)
