# Fichier: academy/schemas/user/user_schema.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime

from academy.models.user.user_model import UserRole


# --- Schéma de Base ---
# Contient les champs communs partagés par les autres schémas.
class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    birth_date: Optional[date] = None
    cin: Optional[str] = None
    phone: Optional[str] = None
    login_id: Optional[str] = None
    role: UserRole = UserRole.EMPLOYE


# --- Création par un administrateur ---
# Le compte devra changer son mot de passe à la première connexion.
class UserCreate(UserBase):
    password: str
    is_active: bool = True
    assigned_formation_ids: List[int] = Field(default_factory=list)


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    cin: Optional[str] = None
    phone: Optional[str] = None
    login_id: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None


class FormationAssignment(BaseModel):
    formation_ids: List[int] = Field(default_factory=list)


# --- Schéma pour la Réponse de l'API ---
# Note : Il n'y a PAS de mot de passe ici.
class User(UserBase):
    id: int
    is_active: bool
    must_change_password: bool
    assigned_formation_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    identifier: str = Field(..., description="Adresse e-mail ou identifiant de connexion")
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    must_change_password: bool = False


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class ForcedPasswordChangeRequest(BaseModel):
    new_password: str
    confirm_password: str


class PasswordChangeResponse(BaseModel):
    success: bool
    detail: Optional[str] = None
