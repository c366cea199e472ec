from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Table, func, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from academy.db.base_class import Base
from typing import List, Optional, TYPE_CHECKING
from datetime import date, datetime
import enum

if TYPE_CHECKING:
    from ..catalog.formation_model import Formation
    from ..progress.formation_progress_model import FormationProgress


class UserRole(str, enum.Enum):
    ARBITRE = "Arbitre"
    ENTRAINEUR = "Entraîneur"
    EMPLOYE = "Employé"
    FORMATEUR = "Formateur"
    CLUB = "Club"
    ADMINISTRATEUR = "Administrateur"

    @property
    def is_privileged(self) -> bool:
        """Administrateurs et formateurs voient tout le catalogue et ne sont pas apprenants."""
        return self in PRIVILEGED_ROLES


PRIVILEGED_ROLES = frozenset({UserRole.ADMINISTRATEUR, UserRole.FORMATEUR})


user_formation_assignments = Table(
    "user_formation_assignments",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("formation_id", ForeignKey("formations.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    cin: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    login_id: Mapped[Optional[str]] = mapped_column(String(100), unique=True, index=True, nullable=True)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="userrole", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=UserRole.EMPLOYE,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # --- Relations ---
    assigned_formations: Mapped[List["Formation"]] = relationship(
        secondary=user_formation_assignments,
        back_populates="assigned_users",
        order_by="Formation.id",
    )
    formation_progress: Mapped[List["FormationProgress"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def assigned_formation_ids(self) -> list[int]:
        return [formation.id for formation in self.assigned_formations]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_privileged(self) -> bool:
        return UserRole(self.role).is_privileged

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
