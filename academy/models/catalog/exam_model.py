from sqlalchemy import Integer, String, Text, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING

from academy.db.base_class import Base

if TYPE_CHECKING:
    from .course_model import Course


class Exam(Base):
    """Examen de fin de partie, avec un seuil de réussite en pourcentage."""
    __tablename__ = "exams"
    __table_args__ = (
        CheckConstraint("passing_score >= 0 AND passing_score <= 100", name="ck_exams_passing_score"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=80)

    questions: Mapped[List["Question"]] = relationship(
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="(Question.order, Question.id)",
    )

    def __repr__(self):
        return f"<Exam(id={self.id}, title='{self.title}', passing_score={self.passing_score})>"


class Question(Base):
    """QCM utilisé à la fois par les tests rapides des cours et par les examens."""
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    correct_answer_index: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exam_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("exams.id"), index=True, nullable=True)
    course_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("courses.id"), index=True, nullable=True)

    exam: Mapped[Optional["Exam"]] = relationship(back_populates="questions")
    course: Mapped[Optional["Course"]] = relationship(back_populates="quick_test_questions")

    def __repr__(self):
        return f"<Question(id={self.id}, options={len(self.options or [])})>"
