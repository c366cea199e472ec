# Fichier: academy/api/v1/endpoints/user_router.py

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from academy.api.v1.dependencies import get_current_user, get_db, raise_http_error
from academy.core import security
from academy.core.config import settings
from academy.models.user.user_model import User
from academy.schemas.user import user_schema
from academy.services import account_service
from academy.services.errors import ProgressionError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=user_schema.LoginResponse)
def login_for_access_token(
    credentials: user_schema.LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    try:
        user = account_service.authenticate(db, credentials.identifier, credentials.password)
    except ProgressionError as exc:
        raise_http_error(exc)

    access_token = security.create_access_token(subject=str(user.id))

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
        path="/",
    )
    return user_schema.LoginResponse(
        access_token=access_token,
        must_change_password=user.must_change_password,
    )


@router.get("/me", response_model=user_schema.User)
def read_users_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/me/password", response_model=user_schema.PasswordChangeResponse)
def change_password(
    payload: user_schema.PasswordChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Changement volontaire depuis le profil. Un mot de passe actuel erroné renvoie ``success=False``."""
    try:
        changed = account_service.change_password(
            db, current_user, payload.current_password, payload.new_password
        )
    except ProgressionError as exc:
        raise_http_error(exc)

    if not changed:
        return user_schema.PasswordChangeResponse(success=False, detail="incorrect_password")
    return user_schema.PasswordChangeResponse(success=True)


@router.post("/me/password/force", response_model=user_schema.PasswordChangeResponse)
def force_change_password(
    payload: user_schema.ForcedPasswordChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        account_service.force_change_password(
            db, current_user, payload.new_password, payload.confirm_password
        )
    except ProgressionError as exc:
        raise_http_error(exc)
    return user_schema.PasswordChangeResponse(success=True)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response) -> Response:
    response.delete_cookie(key="access_token", path="/")
    response.status_code = status.HTTP_204_NO_CONTENT
    return response
