import pytest

from family100.errors import AuthFailure
from family100.models import Role
from family100.security import PasswordHasher, SessionStore


def test_password_hash_roundtrip():
    hashed = PasswordHasher.get_password_hash("host123")
    assert hashed != "host123"
    assert PasswordHasher.verify_password("host123", hashed)
    assert not PasswordHasher.verify_password("host124", hashed)


@pytest.mark.parametrize("username", ["host", "HOST", " Host "])
def test_lookup_ignores_username_case(identity, username):
    assert identity.lookup(username, "host123") == Role.HOST


def test_lookup_password_is_case_sensitive(identity):
    with pytest.raises(AuthFailure):
        identity.lookup("host", "HOST123")


@pytest.mark.parametrize(
    "username,password",
    [("nobody", "host123"), ("host", ""), ("", "host123"), (None, None), (123, 456), ("host", ["host123"])],
)
def test_lookup_failures(identity, username, password):
    with pytest.raises(AuthFailure):
        identity.lookup(username, password)


def test_admin_and_host_are_host_privileged(identity):
    assert identity.lookup("admin", "admin123").host_privileged
    assert identity.lookup("host", "host123").host_privileged
    assert not identity.lookup("player2", "player123").host_privileged


def test_session_store_expires_records(monkeypatch):
    store = SessionStore(ttl_seconds=60)
    sid = store.create("host", Role.HOST)
    assert store.get(sid)["username"] == "host"

    monkeypatch.setattr("family100.security.time.time", lambda: 10 ** 12)
    assert store.get(sid) is None


def test_session_store_delete():
    store = SessionStore(ttl_seconds=60)
    sid = store.create("player1", Role.PLAYER)
    store.delete(sid)
    store.delete(None)
    assert store.get(sid) is None
    assert store.get(None) is None


def test_session_store_prunes_expired_records_on_create(monkeypatch):
    store = SessionStore(ttl_seconds=60)
    clock = [1000.0]
    monkeypatch.setattr("family100.security.time.time", lambda: clock[0])
    store.create("player1", Role.PLAYER)
    store.create("player2", Role.PLAYER)
    assert len(store) == 2

    clock[0] += 120
    fresh = store.create("host", Role.HOST)

    assert len(store) == 1
    assert store.get(fresh)["username"] == "host"
