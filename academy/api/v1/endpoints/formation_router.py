# Fichier: academy/api/v1/endpoints/formation_router.py
"""Parcours apprenant: formations, cours, tests rapides et examens."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.api.v1.dependencies import get_current_active_user, get_db, raise_http_error
from academy.models.user.user_model import User
from academy.schemas.catalog.course_schema import CourseRead, QuickTestResult, QuickTestSubmission
from academy.schemas.catalog.formation_schema import ExamPublic
from academy.schemas.progress import progress_schema
from academy.services.errors import ProgressionError
from academy.services.progress_service import ProgressService

router = APIRouter()


@router.get("/", response_model=List[progress_schema.FormationOverview])
def list_formations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Formations visibles par l'utilisateur, avec son pourcentage d'avancement."""
    return ProgressService(db, current_user).list_formations()


@router.get("/{formation_id}", response_model=progress_schema.FormationDetail)
def read_formation(
    formation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).formation_detail(formation_id)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.get("/{formation_id}/courses/{course_id}", response_model=CourseRead)
def read_course(
    formation_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).get_course(formation_id, course_id)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.post("/{formation_id}/courses/{course_id}/quick-test", response_model=QuickTestResult)
def check_quick_test(
    formation_id: int,
    course_id: int,
    submission: QuickTestSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).check_quick_test(formation_id, course_id, submission.answers)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.post("/{formation_id}/courses/{course_id}/complete", response_model=progress_schema.CourseCompletionResponse)
def complete_course(
    formation_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).complete_course(formation_id, course_id)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.get("/{formation_id}/parts/{part_id}/exam", response_model=ExamPublic)
def read_exam(
    formation_id: int,
    part_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).get_exam(formation_id, part_id)
    except ProgressionError as exc:
        raise_http_error(exc)


@router.post("/{formation_id}/parts/{part_id}/exam", response_model=progress_schema.ExamSubmissionResult)
def submit_exam(
    formation_id: int,
    part_id: int,
    submission: progress_schema.ExamSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).submit_exam(formation_id, part_id, submission.answers)
    except ProgressionError as exc:
        raise_http_error(exc)
