# Fichier: academy/api/v1/endpoints/progress_router.py

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.api.v1.dependencies import get_current_active_user, get_db, raise_http_error
from academy.models.user.user_model import User
from academy.schemas.progress import progress_schema
from academy.services.errors import ProgressionError
from academy.services.progress_service import ProgressService

router = APIRouter()


@router.get("/overview", response_model=progress_schema.OverallProgressResponse)
def read_overall_progress(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Avancement global, pondéré par le nombre de cours de chaque formation."""
    return ProgressService(db, current_user).overview()


@router.get("/certificates", response_model=List[progress_schema.CertifiedPart])
def list_certificates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return ProgressService(db, current_user).certificates()


@router.get("/certificates/{part_id}", response_model=progress_schema.Attestation)
def read_attestation(
    part_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        return ProgressService(db, current_user).attestation(part_id)
    except ProgressionError as exc:
        raise_http_error(exc)
