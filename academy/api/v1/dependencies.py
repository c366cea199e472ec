import logging
import re
from typing import Generator
from urllib.parse import unquote

from fastapi import Depends, HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from academy.core import security
from academy.db import session as db_session
from academy.models.user.user_model import User, UserRole
from academy.services.errors import ProgressionError

log = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """Une session SQLAlchemy par requête, fermée à la fin du traitement."""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def raise_http_error(exc: ProgressionError) -> None:
    """Traduit une erreur métier en ``HTTPException`` (code machine en ``detail``)."""
    raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Return a clean JWT string from an ``Authorization`` header or cookie value.

    Browsers can percent-encode cookie values (``Bearer%20…``) and some
    frontends send quoted strings; both are accepted, as is a case-insensitive
    ``Bearer`` prefix.
    """

    if raw_token is None:
        return None

    token = unquote(raw_token.strip().strip('"').strip("'"))
    if not token:
        return None

    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)

    token = token.strip()
    return token or None


def _decode_user_from_token(token: str | None, db: Session) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _normalize_token_value(token)
    if not token:
        log.warning("Validation échouée: Pas de token fourni.")
        raise credentials_exception

    try:
        payload = jwt.decode(token, security.SECRET_KEY, algorithms=[security.ALGORITHM])
        user_id_str = payload.get("sub")
        if user_id_str is None:
            log.warning("Validation échouée: Le token ne contient pas de 'sub'.")
            raise credentials_exception
        user_id = int(user_id_str)
    except ExpiredSignatureError:
        log.warning("Validation échouée: Le token a expiré.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    except (JWTError, ValueError, TypeError):
        log.warning("Validation échouée: Le token est invalide ou mal formé.")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        log.warning("Validation échouée: Utilisateur avec ID %s non trouvé.", user_id)
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="account_disabled")

    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = request.headers.get("Authorization") or request.cookies.get("access_token")
    return _decode_user_from_token(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Utilisateur authentifié dont le mot de passe initial a été remplacé.

    Seuls ``/users/me`` et les routes de changement de mot de passe restent
    accessibles tant que ``must_change_password`` est positionné.
    """
    if current_user.must_change_password:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="password_change_required")
    return current_user


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Gestion des comptes: réservée aux administrateurs."""
    if UserRole(current_user.role) != UserRole.ADMINISTRATEUR:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_required")
    return current_user


def require_content_manager(current_user: User = Depends(get_current_active_user)) -> User:
    """Gestion du catalogue: administrateurs et formateurs."""
    if not UserRole(current_user.role).is_privileged:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin_required")
    return current_user
