# tests/test_auth.py

from datetime import datetime, timedelta

import pytest
from sqlalchemy import text

from sales_ops.auth import AuthManager, UserSession

from conftest import USER_PASSWORD, make_engine


@pytest.fixture
def store():
    return {}


@pytest.fixture
def session(store):
    return UserSession(store, timeout=timedelta(hours=8))


@pytest.fixture
def auth(session, engine):
    return AuthManager(session, engine=engine)


# =============================================================================
# CREDENTIAL CHECKS
# =============================================================================

def test_validate_credentials():
    assert AuthManager.validate_credentials('', 'x') == "Email and password are required"
    assert AuthManager.validate_credentials('a@b.co', '') == "Email and password are required"
    assert AuthManager.validate_credentials('not-an-email', 'x') == "Invalid email format"
    assert AuthManager.validate_credentials('a b@c.io', 'x') == "Invalid email format"
    assert AuthManager.validate_credentials(' a@b.co ', 'x') is None


def test_malformed_email_never_queries(session):
    auth = AuthManager(session)
    ok, result = auth.authenticate('nobody', 'secret')
    assert not ok
    assert result == {"error": "Invalid email format"}
    assert auth._engine is None


def test_password_hash_roundtrip(session):
    auth = AuthManager(session)
    pwd_hash, salt = auth.hash_password('hunter2')
    assert len(salt) == 64
    assert auth.verify_password('hunter2', pwd_hash, salt)
    assert not auth.verify_password('hunter3', pwd_hash, salt)


# =============================================================================
# AUTHENTICATE
# =============================================================================

def test_authenticate_is_case_insensitive_on_email(auth, engine):
    ok, user = auth.authenticate('ops.lead@acme.io', USER_PASSWORD)

    assert ok
    assert user['id'] == 7
    assert user['full_name'] == 'Ops Lead'

    with engine.connect() as conn:
        last_login = conn.execute(text('SELECT last_login FROM dashboard_users WHERE id = 7')).scalar()
    assert last_login is not None


def test_wrong_password(auth):
    assert auth.authenticate('ops.lead@acme.io', 'nope') == (False, {"error": "Invalid email or password"})


def test_unknown_user(auth):
    assert auth.authenticate('ghost@acme.io', USER_PASSWORD) == (False, {"error": "Invalid email or password"})


def test_inactive_user(auth):
    ok, result = auth.authenticate('gone@acme.io', USER_PASSWORD)
    assert not ok
    assert "inactive" in result["error"]


def test_database_failure(session):
    auth = AuthManager(session, engine=make_engine())
    assert auth.authenticate('ops.lead@acme.io', USER_PASSWORD) == (
        False, {"error": "Authentication failed. Please try again."}
    )


# =============================================================================
# SESSION LIFECYCLE
# =============================================================================

def test_login_and_logout(auth, session, store):
    ok, user = auth.authenticate('Ops.Lead@Acme.io', USER_PASSWORD)
    auth.login(user)

    assert auth.check_session()
    assert session.user_id == 7
    assert session.display_name == 'Ops Lead'
    assert session.account_name == 'ACME'
    assert session.account_number == '#SD7'
    assert session.last_login_display == 'Just now'

    auth.logout()
    assert not auth.check_session()
    assert store == {}


def test_session_expires(session, store):
    login_time = datetime(2024, 1, 1, 8, 0)
    session.load({'id': 1, 'email': 'a@b.co', 'login_time': login_time})

    assert session.is_valid(now=login_time + timedelta(hours=7))
    assert not session.is_valid(now=login_time + timedelta(hours=9))
    assert not session.is_authenticated
    assert 'user_id' not in store


def test_session_display_fallbacks(session):
    assert not session.is_authenticated
    assert session.display_name == 'User'
    assert session.account_name == 'ORGANIZATION'
    assert session.account_number == '#SD1123'

    session.load({
        'id': 123456789,
        'email': 'jo@fieldsales.co.zm',
        'organization': None,
        'last_login': datetime(2024, 2, 1, 14, 5),
    })
    assert session.display_name == 'jo'
    assert session.account_name == 'FIELDSALES'
    assert session.account_number == '#SD123456'
    assert session.last_login_display == 'Feb 01, 2024, 02:05 PM'


def test_session_prefers_stored_account_fields(session):
    session.load({
        'id': 8,
        'email': 'gone@acme.io',
        'full_name': 'Former User',
        'organization': 'Acme Field Sales',
        'account_number': '#SD0008',
    })
    assert session.account_name == 'Acme Field Sales'
    assert session.account_number == '#SD0008'
