from sqlalchemy import Integer, String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING

from academy.db.base_class import Base

if TYPE_CHECKING:
    from .course_model import Course
    from .exam_model import Exam
    from academy.models.user.user_model import User


class Formation(Base):
    """Programme de formation composé de parties ordonnées."""
    __tablename__ = "formations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # --- Relations ---
    parts: Mapped[List["Part"]] = relationship(
        back_populates="formation",
        cascade="all, delete-orphan",
        order_by="(Part.order, Part.id)",
    )
    assigned_users: Mapped[List["User"]] = relationship(
        secondary="user_formation_assignments",
        back_populates="assigned_formations",
    )

    @property
    def part_ids(self) -> list[int]:
        return [part.id for part in self.parts]

    def __repr__(self):
        return f"<Formation(id={self.id}, title='{self.title}')>"


class Part(Base):
    """Segment d'une formation: des cours ordonnés puis exactement un examen."""
    __tablename__ = "parts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    formation_id: Mapped[int] = mapped_column(Integer, ForeignKey("formations.id"), index=True)
    exam_id: Mapped[int] = mapped_column(Integer, ForeignKey("exams.id"), unique=True, nullable=False)

    # --- Relations ---
    formation: Mapped["Formation"] = relationship(back_populates="parts")
    courses: Mapped[List["Course"]] = relationship(
        back_populates="part",
        cascade="all, delete-orphan",
        order_by="(Course.order, Course.id)",
    )
    exam: Mapped["Exam"] = relationship(cascade="all, delete-orphan", single_parent=True)

    @property
    def course_ids(self) -> list[int]:
        return [course.id for course in self.courses]

    def __repr__(self):
        return f"<Part(id={self.id}, title='{self.title}', order={self.order})>"
