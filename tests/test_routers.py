import pytest
from fastapi import HTTPException, Response

from academy.api.v1 import dependencies
from academy.api.v1.endpoints import admin_router, formation_router, progress_router, user_router
from academy.core import security
from academy.models.user.user_model import UserRole
from academy.schemas.catalog.formation_schema import PartCreate
from academy.schemas.progress.progress_schema import ExamSubmission
from academy.schemas.user.user_schema import (
    FormationAssignment,
    ForcedPasswordChangeRequest,
    LoginRequest,
    PasswordChangeRequest,
    UserCreate,
    UserUpdate,
)
from tests.utils import correct_answers, create_formation, create_user


def test_login_returns_token_and_password_flag(db_session):
    user = create_user(db_session, email="arbitre@ligue.com", password="password", must_change_password=True)
    response = Response()

    result = user_router.login_for_access_token(
        LoginRequest(identifier="arbitre@ligue.com", password="password"), response, db=db_session
    )

    assert result.must_change_password is True
    assert dependencies._decode_user_from_token(f"Bearer {result.access_token}", db_session).id == user.id
    assert "access_token" in response.headers["set-cookie"]


def test_login_errors_are_translated(db_session):
    create_user(db_session, email="employe@ligue.com", password="password", is_active=False)

    with pytest.raises(HTTPException) as exc:
        user_router.login_for_access_token(
            LoginRequest(identifier="employe@ligue.com", password="wrong"), Response(), db=db_session
        )
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException) as exc:
        user_router.login_for_access_token(
            LoginRequest(identifier="employe@ligue.com", password="password"), Response(), db=db_session
        )
    assert exc.value.status_code == 403
    assert exc.value.detail == "account_disabled"


def test_invalid_token_is_rejected(db_session):
    with pytest.raises(HTTPException) as exc:
        dependencies._decode_user_from_token("Bearer not-a-jwt", db_session)
    assert exc.value.status_code == 401

    user = create_user(db_session, is_active=False)
    with pytest.raises(HTTPException) as exc:
        dependencies._decode_user_from_token(security.create_access_token(user.id), db_session)
    assert exc.value.status_code == 403


def test_password_endpoints(db_session):
    user = create_user(db_session, password="initial", must_change_password=True)

    forced = user_router.force_change_password(
        ForcedPasswordChangeRequest(new_password="secret-1", confirm_password="secret-1"),
        db=db_session,
        current_user=user,
    )
    assert forced.success is True

    refused = user_router.change_password(
        PasswordChangeRequest(current_password="initial", new_password="secret-2"),
        db=db_session,
        current_user=user,
    )
    assert refused.success is False

    with pytest.raises(HTTPException) as exc:
        user_router.change_password(
            PasswordChangeRequest(current_password="secret-1", new_password="abc"),
            db=db_session,
            current_user=user,
        )
    assert exc.value.detail == "password_too_short"


def test_course_lock_is_reported_as_forbidden(db_session):
    formation = create_formation(db_session)
    learner = create_user(db_session, formations=[formation])

    with pytest.raises(HTTPException) as exc:
        formation_router.read_course(formation.id, formation.parts[0].courses[1].id, db=db_session, current_user=learner)
    assert exc.value.status_code == 403
    assert exc.value.detail == "course_locked"

    with pytest.raises(HTTPException) as exc:
        formation_router.read_formation(999, db=db_session, current_user=learner)
    assert exc.value.status_code == 404


def test_learner_journey_through_the_endpoints(db_session):
    formation = create_formation(db_session, course_counts=(2,))
    learner = create_user(db_session, formations=[formation])
    part = formation.parts[0]

    for course in part.courses:
        formation_router.complete_course(formation.id, course.id, db=db_session, current_user=learner)

    exam = formation_router.read_exam(formation.id, part.id, db=db_session, current_user=learner)
    assert exam.remaining_attempts == 3

    result = formation_router.submit_exam(
        formation.id,
        part.id,
        ExamSubmission(answers=correct_answers(part.exam)),
        db=db_session,
        current_user=learner,
    )
    assert result.passed is True

    certificates = progress_router.list_certificates(db=db_session, current_user=learner)
    assert [c.part_id for c in certificates] == [part.id]
    attestation = progress_router.read_attestation(part.id, db=db_session, current_user=learner)
    assert attestation.part_title == part.title
    assert progress_router.read_overall_progress(db=db_session, current_user=learner).percentage == 100


def test_submitting_with_unknown_question_is_a_bad_request(db_session):
    formation = create_formation(db_session, course_counts=(1,))
    learner = create_user(db_session, formations=[formation])
    part = formation.parts[0]
    formation_router.complete_course(formation.id, part.courses[0].id, db=db_session, current_user=learner)

    with pytest.raises(HTTPException) as exc:
        formation_router.submit_exam(
            formation.id, part.id, ExamSubmission(answers={9999: 0}), db=db_session, current_user=learner
        )
    assert exc.value.status_code == 400
    assert exc.value.detail == "unknown_question"


def test_user_management_is_reserved_to_administrators(db_session):
    trainer = create_user(db_session, email="formateur@ligue.com", role=UserRole.FORMATEUR)
    with pytest.raises(HTTPException) as exc:
        dependencies.require_admin(current_user=trainer)
    assert exc.value.detail == "admin_required"
    assert dependencies.require_content_manager(current_user=trainer) is trainer

    learner = create_user(db_session, email="club@ligue.com", role=UserRole.CLUB)
    with pytest.raises(HTTPException):
        dependencies.require_content_manager(current_user=learner)


def test_admin_creates_user_and_assigns_formations(db_session):
    admin = create_user(db_session, email="admin@ligue.com", role=UserRole.ADMINISTRATEUR)
    formation = create_formation(db_session)
    payload = UserCreate(first_name="Marie", last_name="Curie", email="entraineur@ligue.com", password="password")

    created = admin_router.create_user(payload, db=db_session, admin=admin)
    assert created.must_change_password is True

    with pytest.raises(HTTPException) as exc:
        admin_router.create_user(payload, db=db_session, admin=admin)
    assert exc.value.detail == "email_already_registered"

    assigned = admin_router.assign_formations(
        created.id, FormationAssignment(formation_ids=[formation.id]), db=db_session, _=admin
    )
    assert assigned.assigned_formation_ids == [formation.id]

    with pytest.raises(HTTPException) as exc:
        admin_router.toggle_user_status(admin.id, db=db_session, admin=admin)
    assert exc.value.detail == "cannot_disable_self"


def test_admin_builds_a_part(db_session):
    admin = create_user(db_session, email="admin@ligue.com", role=UserRole.ADMINISTRATEUR)
    formation = create_formation(db_session, course_counts=(1,))

    part = admin_router.create_part(formation.id, PartCreate(title="Partie finale"), db=db_session, _=admin)
    course = admin_router.create_course(part.id, None, db=db_session, _=admin)
    exam = admin_router.read_exam(part.id, db=db_session, _=admin)

    assert course.title == "Nouveau cours"
    assert exam.title == "Examen - Partie finale"
    assert [p.id for p in formation.parts][-1] == part.id


def test_initial_password_must_be_replaced_before_training(db_session):
    user = create_user(db_session, email="nouveau@ligue.com", password="password", must_change_password=True)

    with pytest.raises(HTTPException) as exc:
        dependencies.get_current_active_user(current_user=user)
    assert exc.value.status_code == 403
    assert exc.value.detail == "password_change_required"

    # Le profil et le changement forcé restent accessibles.
    assert user_router.read_users_me(current_user=user).id == user.id
    user_router.force_change_password(
        ForcedPasswordChangeRequest(new_password="nouveau-secret", confirm_password="nouveau-secret"),
        db=db_session,
        current_user=user,
    )
    assert dependencies.get_current_active_user(current_user=user) is user


def test_admin_update_rejects_a_taken_login_id(db_session):
    admin = create_user(db_session, email="admin@ligue.com", role=UserRole.ADMINISTRATEUR)
    create_user(db_session, email="premier@ligue.com", login_id="arbitre01")
    other = create_user(db_session, email="second@ligue.com")

    with pytest.raises(HTTPException) as exc:
        admin_router.update_user(other.id, UserUpdate(login_id="arbitre01"), db=db_session, _=admin)
    assert exc.value.status_code == 400
    assert exc.value.detail == "login_id_already_taken"

    with pytest.raises(HTTPException) as exc:
        admin_router.update_user(other.id, UserUpdate(email="premier@ligue.com"), db=db_session, _=admin)
    assert exc.value.detail == "email_already_registered"

    db_session.refresh(other)
    assert other.login_id is None


def test_admin_update_ignores_null_for_required_fields(db_session):
    admin = create_user(db_session, email="admin@ligue.com", role=UserRole.ADMINISTRATEUR)
    user = create_user(db_session, email="arbitre@ligue.com")

    updated = admin_router.update_user(
        user.id, UserUpdate(first_name=None, last_name=None, phone="0600000000"), db=db_session, _=admin
    )

    assert updated.first_name == "Jean"
    assert updated.last_name == "Dupont"
    assert updated.phone == "0600000000"


def test_admin_set_passwords_respect_the_minimum_length(db_session):
    admin = create_user(db_session, email="admin@ligue.com", role=UserRole.ADMINISTRATEUR)
    payload = UserCreate(first_name="Marie", last_name="Curie", email="entraineur@ligue.com", password="abc")

    with pytest.raises(HTTPException) as exc:
        admin_router.create_user(payload, db=db_session, admin=admin)
    assert exc.value.detail == "password_too_short"

    user = create_user(db_session, email="arbitre@ligue.com")
    with pytest.raises(HTTPException) as exc:
        admin_router.update_user(user.id, UserUpdate(password="abc"), db=db_session, _=admin)
    assert exc.value.detail == "password_too_short"
