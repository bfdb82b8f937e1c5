import pytest
from datetime import datetime, timedelta, timezone
from core.exceptions import Unauthorized
from models.sessions import UserSession
from services.session_service import SessionService
from tests.factories import make_user
from utils.verification import as_utc

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_cookie_does_not_contain_stored_value(session):
    user = make_user(session, "maker@example.com")
    cookie = SessionService.create(session, user, now=T0)

    stored = session.query(UserSession).one()
    session_id = SessionService.unsign(cookie)
    assert stored.session_hash != session_id
    assert len(stored.session_hash) == 64
    assert as_utc(stored.expires_at) == T0 + timedelta(days=7)


def test_recent_use_does_not_rewrite_session(session):
    user = make_user(session, "maker@example.com")
    cookie = SessionService.create(session, user, now=T0)

    resolved = SessionService.resolve(session, cookie, now=T0 + timedelta(hours=1))

    assert resolved.user_id == user.id
    assert as_utc(resolved.last_touched_at) == T0
    assert as_utc(resolved.expires_at) == T0 + timedelta(days=7)


def test_use_after_touch_window_slides_expiry(session):
    user = make_user(session, "maker@example.com")
    cookie = SessionService.create(session, user, now=T0)
    later = T0 + timedelta(hours=25)

    resolved = SessionService.resolve(session, cookie, now=later)

    assert as_utc(resolved.last_touched_at) == later
    assert as_utc(resolved.expires_at) == later + timedelta(days=7)


def test_expired_session_is_deleted(session):
    user = make_user(session, "maker@example.com")
    cookie = SessionService.create(session, user, now=T0)

    with pytest.raises(Unauthorized) as exc_info:
        SessionService.resolve(session, cookie, now=T0 + timedelta(days=8))

    assert exc_info.value.message == "Session expired"
    assert session.query(UserSession).count() == 0


def test_destroy(session):
    user = make_user(session, "maker@example.com")
    cookie = SessionService.create(session, user, now=T0)

    SessionService.destroy(session, "garbage-cookie")
    assert session.query(UserSession).count() == 1

    SessionService.destroy(session, cookie)
    assert session.query(UserSession).count() == 0


def test_destroy_all(session):
    user = make_user(session, "maker@example.com")
    other = make_user(session, "other@example.com")
    SessionService.create(session, user)
    SessionService.create(session, user)
    SessionService.create(session, other)

    SessionService.destroy_all(session, user.id)

    assert session.query(UserSession).filter(UserSession.user_id == other.id).count() == 1
    assert session.query(UserSession).count() == 1


def test_unsign_rejects_garbage():
    with pytest.raises(Unauthorized):
        SessionService.unsign("definitely.not.signed")
