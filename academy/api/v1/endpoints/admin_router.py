# Fichier: academy/api/v1/endpoints/admin_router.py
"""Back office: gestion des comptes (administrateurs) et du catalogue (administrateurs et formateurs)."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from academy.api.v1.dependencies import get_db, raise_http_error, require_admin, require_content_manager
from academy.crud import catalog_crud, user_crud
from academy.models.catalog.course_model import Course
from academy.models.user.user_model import User
from academy.schemas.catalog.course_schema import CourseAdminRead, CourseCreate, CourseUpdate
from academy.schemas.catalog.formation_schema import (
    ExamAdminRead,
    ExamUpdate,
    FormationCreate,
    FormationRead,
    FormationUpdate,
    PartCreate,
    PartRead,
    PartUpdate,
)
from academy.schemas.catalog.question_schema import QuestionIn
from academy.schemas.user import user_schema
from academy.services.errors import ProgressionError

router = APIRouter()
logger = logging.getLogger(__name__)


def _course_admin_read(course: Course) -> CourseAdminRead:
    return CourseAdminRead(
        id=course.id,
        title=course.title,
        course_type=course.course_type,
        content=course.payload,
        quick_test_questions=[QuestionIn.model_validate(q) for q in course.quick_test_questions],
    )


# --- Utilisateurs ---

@router.get("/users", response_model=List[user_schema.User])
def list_users(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return user_crud.list_users(db)


@router.post("/users", response_model=user_schema.User, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: user_schema.UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        user = user_crud.create_user(db, user_in)
    except ProgressionError as exc:
        raise_http_error(exc)
    logger.info("Compte %s créé par l'administrateur %s", user.id, admin.id)
    return user


@router.patch("/users/{user_id}", response_model=user_schema.User)
def update_user(
    user_id: int,
    user_in: user_schema.UserUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    try:
        return user_crud.update_user(db, user_id, user_in)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.post("/users/{user_id}/toggle-active", response_model=user_schema.User)
def toggle_user_status(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="cannot_disable_self")
    try:
        return user_crud.toggle_user_status(db, user_id)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.put("/users/{user_id}/formations", response_model=user_schema.User)
def assign_formations(
    user_id: int,
    assignment: user_schema.FormationAssignment,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    try:
        return user_crud.assign_formations(db, user_id, assignment.formation_ids)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="cannot_delete_self")
    try:
        user_crud.delete_user(db, user_id)
    except ProgressionError as exc:
        raise_http_error(exc)


# --- Formations ---

@router.get("/formations", response_model=List[FormationRead])
def list_formations(db: Session = Depends(get_db), _: User = Depends(require_content_manager)):
    return catalog_crud.list_formations(db)


@router.post("/formations", response_model=FormationRead, status_code=status.HTTP_201_CREATED)
def create_formation(
    formation_in: FormationCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    return catalog_crud.create_formation(db, formation_in)


@router.patch("/formations/{formation_id}", response_model=FormationRead)
def update_formation(
    formation_id: int,
    formation_in: FormationUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return catalog_crud.update_formation(db, formation_id, formation_in)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.delete("/formations/{formation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_formation(
    formation_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        catalog_crud.delete_formation(db, formation_id)
    except ProgressionError as exc:
        raise_http_error(exc)


# --- Parties ---

@router.post("/formations/{formation_id}/parts", response_model=PartRead, status_code=status.HTTP_201_CREATED)
def create_part(
    formation_id: int,
    part_in: PartCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return catalog_crud.create_part(db, formation_id, part_in)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.patch("/parts/{part_id}", response_model=PartRead)
def update_part(
    part_id: int,
    part_in: PartUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return catalog_crud.update_part(db, part_id, part_in)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.delete("/parts/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_part(
    part_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        catalog_crud.delete_part(db, part_id)
    except ProgressionError as exc:
        raise_http_error(exc)


# --- Cours ---

@router.post("/parts/{part_id}/courses", response_model=CourseAdminRead, status_code=status.HTTP_201_CREATED)
def create_course(
    part_id: int,
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return _course_admin_read(catalog_crud.create_course(db, part_id, course_in))
    except ProgressionError as exc:
        raise_http_error(exc)


@router.patch("/courses/{course_id}", response_model=CourseAdminRead)
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return _course_admin_read(catalog_crud.update_course(db, course_id, course_in))
    except ProgressionError as exc:
        raise_http_error(exc)


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        catalog_crud.delete_course(db, course_id)
    except ProgressionError as exc:
        raise_http_error(exc)


# --- Examens ---

@router.get("/parts/{part_id}/exam", response_model=ExamAdminRead)
def read_exam(
    part_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return catalog_crud.get_part(db, part_id).exam
    except ProgressionError as exc:
        raise_http_error(exc)


@router.put("/parts/{part_id}/exam", response_model=ExamAdminRead)
def update_exam(
    part_id: int,
    exam_in: ExamUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_content_manager),
):
    try:
        return catalog_crud.update_exam(db, part_id, exam_in)
    except ProgressionError as exc:
        raise_http_error(exc)
