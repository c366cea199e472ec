# academy/services/account_service.py

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from academy.core import security
from academy.crud import user_crud
from academy.models.user.user_model import User
from academy.services.errors import AuthenticationFailed, InvalidSubmission, PolicyViolation

logger = logging.getLogger(__name__)


def authenticate(db: Session, identifier: str, password: str) -> User:
    """Connexion par email ou identifiant. Les comptes désactivés sont refusés."""
    user = user_crud.get_user_by_identifier(db, identifier)
    if user is None or not security.verify_password(password, user.hashed_password):
        logger.info("Échec de connexion pour '%s'", identifier)
        raise AuthenticationFailed()
    if not user.is_active:
        raise PolicyViolation("account_disabled")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> bool:
    """Retourne ``False`` si le mot de passe actuel est faux; rien n'est modifié dans ce cas."""
    user_crud.check_password_strength(new_password)
    if not security.verify_password(current_password, user.hashed_password):
        logger.info("Changement de mot de passe refusé pour l'utilisateur %s", user.id)
        return False

    user.hashed_password = security.get_password_hash(new_password)
    user.must_change_password = False
    db.commit()
    return True


def force_change_password(db: Session, user: User, new_password: str, confirm_password: str) -> None:
    """Premier changement obligatoire, sans le mot de passe initial."""
    if not user.must_change_password:
        raise PolicyViolation("password_change_not_required")
    if new_password != confirm_password:
        raise InvalidSubmission("password_mismatch")
    user_crud.check_password_strength(new_password)

    user.hashed_password = security.get_password_hash(new_password)
    user.must_change_password = False
    db.commit()
    logger.info("Mot de passe initial remplacé pour l'utilisateur %s", user.id)
