import enum
from sqlalchemy import Integer, String, ForeignKey, JSON, Enum as EnumSQL
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Dict, Any, List, TYPE_CHECKING

from academy.db.base_class import Base

if TYPE_CHECKING:
    from .formation_model import Part
    from .exam_model import Question
    from academy.schemas.catalog.course_schema import CourseContent


class CourseType(str, enum.Enum):
    VIDEO = "VIDEO"      # URL d'une vidéo (YouTube)
    ARTICLE = "ARTICLE"  # Corps de texte
    PDF = "PDF"          # URL d'un document


class Course(Base):
    """Unité d'apprentissage d'une partie, suivie d'un test rapide optionnel."""
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    course_type: Mapped[CourseType] = mapped_column(
        EnumSQL(CourseType, name="course_type_enum"), nullable=False
    )
    # Charge utile typée par ``course_type`` (voir ``Course.payload``)
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    part_id: Mapped[int] = mapped_column(Integer, ForeignKey("parts.id"), index=True)

    # --- Relations ---
    part: Mapped["Part"] = relationship(back_populates="courses")
    quick_test_questions: Mapped[List["Question"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="(Question.order, Question.id)",
    )

    @property
    def payload(self) -> "CourseContent":
        from academy.schemas.catalog.course_schema import parse_course_content

        return parse_course_content(self.course_type, self.content)

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}', type='{self.course_type}')>"
