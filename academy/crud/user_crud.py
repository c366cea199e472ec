# Fichier: academy/crud/user_crud.py

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.security import get_password_hash
from academy.models.catalog.formation_model import Formation
from academy.models.user.user_model import User
from academy.schemas.user.user_schema import UserCreate, UserUpdate
from academy.services.errors import ContentNotFound, InvalidSubmission

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = ("first_name", "last_name", "email", "role", "is_active")


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ContentNotFound("user_not_found")
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Récupère un utilisateur par son adresse email (insensible à la casse).

    Args:
        db: La session de base de données.
        email: L'email de l'utilisateur à rechercher.

    Returns:
        L'objet User s'il est trouvé, sinon None.
    """
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def get_user_by_login_id(db: Session, login_id: str) -> Optional[User]:
    return db.query(User).filter(User.login_id == login_id.strip()).first()


def get_user_by_identifier(db: Session, identifier: str) -> Optional[User]:
    """Recherche par email ou par identifiant de connexion."""
    value = (identifier or "").strip()
    if not value:
        return None
    return (
        db.query(User)
        .filter(or_(func.lower(User.email) == value.lower(), User.login_id == value))
        .first()
    )


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id.asc()).all()


def _load_formations(db: Session, formation_ids: Iterable[int]) -> List[Formation]:
    wanted = sorted(set(formation_ids))
    if not wanted:
        return []
    formations = db.query(Formation).filter(Formation.id.in_(wanted)).all()
    if len(formations) != len(wanted):
        raise ContentNotFound("formation_not_found")
    return formations


def check_password_strength(password: Optional[str]) -> None:
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise InvalidSubmission("password_too_short")


def _check_unique_identifiers(db: Session, email: Optional[str], login_id: Optional[str], user_id: Optional[int] = None) -> None:
    if email:
        existing = get_user_by_email(db, email)
        if existing is not None and existing.id != user_id:
            raise InvalidSubmission("email_already_registered")
    if login_id:
        existing = get_user_by_login_id(db, login_id)
        if existing is not None and existing.id != user_id:
            raise InvalidSubmission("login_id_already_taken")


def _commit_user(db: Session, db_user: User) -> User:
    try:
        db.commit()
    except IntegrityError as exc:
        # Course perdue contre une autre écriture sur email/login_id.
        db.rollback()
        logger.warning("Écriture du compte refusée par la base: %s", exc.orig)
        raise InvalidSubmission("user_constraint_violation") from exc
    db.refresh(db_user)
    return db_user


def create_user(db: Session, user: UserCreate) -> User:
    """
    Crée un compte. Le mot de passe initial est choisi par l'administrateur,
    l'utilisateur devra donc le changer à sa première connexion.
    """
    check_password_strength(user.password)
    login_id = (user.login_id or "").strip() or None
    _check_unique_identifiers(db, user.email, login_id)

    db_user = User(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        birth_date=user.birth_date,
        cin=user.cin,
        phone=user.phone,
        login_id=login_id,
        role=user.role,
        is_active=user.is_active,
        must_change_password=True,
        hashed_password=get_password_hash(user.password),
    )
    db_user.assigned_formations = _load_formations(db, user.assigned_formation_ids)
    db.add(db_user)
    return _commit_user(db, db_user)


def update_user(db: Session, user_id: int, user_in: UserUpdate) -> User:
    db_user = get_user(db, user_id)
    data = user_in.model_dump(exclude_unset=True)
    password = data.pop("password", None)

    # Un null explicite sur une colonne obligatoire vaut "ne pas modifier".
    for field in REQUIRED_USER_FIELDS:
        if data.get(field, "") is None:
            data.pop(field)
    if "login_id" in data:
        data["login_id"] = (data["login_id"] or "").strip() or None
    _check_unique_identifiers(db, data.get("email"), data.get("login_id"), user_id=user_id)

    if password is not None:
        check_password_strength(password)

    for field, value in data.items():
        setattr(db_user, field, value)
    if password:
        db_user.hashed_password = get_password_hash(password)
        db_user.must_change_password = True
    return _commit_user(db, db_user)


def toggle_user_status(db: Session, user_id: int) -> User:
    db_user = get_user(db, user_id)
    db_user.is_active = not db_user.is_active
    db.commit()
    db.refresh(db_user)
    return db_user


def assign_formations(db: Session, user_id: int, formation_ids: Iterable[int]) -> User:
    """Remplace la liste des formations affectées. La progression existante est conservée."""
    db_user = get_user(db, user_id)
    db_user.assigned_formations = _load_formations(db, formation_ids)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, user_id: int) -> None:
    db_user = get_user(db, user_id)
    db.delete(db_user)
    db.commit()
