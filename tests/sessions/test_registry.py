from datetime import timedelta

from tests.fakes import T0, InMemoryKeyValueStore, InMemorySessions, make_lifecycle

from src.time_tracker.time_tracker.core.enums import SessionState
from src.time_tracker.time_tracker.sessions.registry import SessionRegistry


def test_registry_returns_same_lifecycle_per_user():
    registry = SessionRegistry(lambda user_id: make_lifecycle(user_id=user_id)[0])

    first = registry.for_user("u-1")
    first.start(now=T0)

    assert registry.for_user("u-1") is first
    assert registry.for_user("u-2") is not first
    assert len(registry) == 2


def test_idle_lifecycles_of_other_users_are_dropped():
    registry = SessionRegistry(lambda user_id: make_lifecycle(user_id=user_id)[0])

    registry.for_user("u-1")
    registry.for_user("u-2")

    assert len(registry) == 1


def test_running_and_completed_lifecycles_are_kept():
    registry = SessionRegistry(lambda user_id: make_lifecycle(user_id=user_id)[0])

    running = registry.for_user("u-1")
    running.start(now=T0)
    done = registry.for_user("u-2")
    done.start(now=T0)
    done.stop(now=T0 + timedelta(hours=1))
    registry.for_user("u-3")

    assert len(registry) == 3
    assert registry.for_user("u-1") is running
    assert registry.for_user("u-2") is done


def test_new_lifecycle_restores_running_session():
    kv = InMemoryKeyValueStore()
    sessions = InMemorySessions()
    earlier, _, _, _ = make_lifecycle(sessions=sessions, kv=kv)
    earlier.start(now=T0 - timedelta(minutes=5))

    registry = SessionRegistry(lambda user_id: make_lifecycle(user_id=user_id, sessions=sessions, kv=kv)[0])
    lifecycle = registry.for_user("u-1")

    assert lifecycle.state == SessionState.RUNNING
    assert lifecycle.current_session.id == earlier.current_session.id
