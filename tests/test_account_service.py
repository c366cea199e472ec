import pytest

from academy.core.security import verify_password
from academy.services import account_service
from academy.services.errors import AuthenticationFailed, InvalidSubmission, PolicyViolation
from tests.utils import create_user


def test_login_with_email_or_login_id(db_session):
    user = create_user(db_session, email="arbitre@ligue.com", login_id="ARB-001", password="password")

    assert account_service.authenticate(db_session, "Arbitre@Ligue.com", "password").id == user.id
    logged = account_service.authenticate(db_session, "ARB-001", "password")
    assert logged.id == user.id
    assert logged.last_login_at is not None


def test_wrong_password_is_refused(db_session):
    create_user(db_session, email="arbitre@ligue.com", password="password")
    with pytest.raises(AuthenticationFailed) as exc:
        account_service.authenticate(db_session, "arbitre@ligue.com", "nope")
    assert exc.value.status_code == 401


def test_inactive_account_is_refused(db_session):
    create_user(db_session, email="employe@ligue.com", password="password", is_active=False)
    with pytest.raises(PolicyViolation) as exc:
        account_service.authenticate(db_session, "employe@ligue.com", "password")
    assert exc.value.code == "account_disabled"


def test_change_password_with_wrong_current_password_changes_nothing(db_session):
    user = create_user(db_session, password="password")
    previous_hash = user.hashed_password

    assert account_service.change_password(db_session, user, "wrong", "nouveau-secret") is False
    assert user.hashed_password == previous_hash


def test_change_password(db_session):
    user = create_user(db_session, password="password")
    assert account_service.change_password(db_session, user, "password", "nouveau-secret") is True
    assert verify_password("nouveau-secret", user.hashed_password)


def test_password_must_be_long_enough(db_session):
    user = create_user(db_session, password="password")
    with pytest.raises(InvalidSubmission) as exc:
        account_service.change_password(db_session, user, "password", "abc")
    assert exc.value.code == "password_too_short"


def test_forced_change_clears_the_flag(db_session):
    user = create_user(db_session, password="initial", must_change_password=True)

    with pytest.raises(InvalidSubmission) as exc:
        account_service.force_change_password(db_session, user, "secret-1", "secret-2")
    assert exc.value.code == "password_mismatch"

    account_service.force_change_password(db_session, user, "secret-1", "secret-1")
    assert user.must_change_password is False
    assert verify_password("secret-1", user.hashed_password)

    with pytest.raises(PolicyViolation):
        account_service.force_change_password(db_session, user, "secret-2", "secret-2")
