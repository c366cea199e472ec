from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.db.base_class import Base

if TYPE_CHECKING:
    from academy.models.user.user_model import User


class FormationProgress(Base):
    """Progression d'un utilisateur dans une formation (clé composite user/formation).

    ``version`` sert de verrou optimiste: deux écritures concurrentes sur la même
    clé ne peuvent pas aboutir toutes les deux.
    """
    __tablename__ = "formation_progress"
    __table_args__ = (UniqueConstraint("user_id", "formation_id", name="uq_formation_progress_user_formation"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    formation_id: Mapped[int] = mapped_column(Integer, ForeignKey("formations.id", ondelete="CASCADE"), index=True)
    completed_course_ids: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="formation_progress")
    exam_attempts: Mapped[List["ExamAttempt"]] = relationship(
        back_populates="progress",
        cascade="all, delete-orphan",
        order_by="ExamAttempt.part_id",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return (
            f"<FormationProgress(user_id={self.user_id}, formation_id={self.formation_id}, "
            f"completed={len(self.completed_course_ids or [])})>"
        )


class ExamAttempt(Base):
    __tablename__ = "exam_attempts"
    __table_args__ = (UniqueConstraint("progress_id", "part_id", name="uq_exam_attempts_progress_part"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    progress_id: Mapped[int] = mapped_column(Integer, ForeignKey("formation_progress.id"), index=True)
    part_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    progress: Mapped["FormationProgress"] = relationship(back_populates="exam_attempts")
