"""Utility helpers for test factories."""

from __future__ import annotations

from typing import Sequence

from academy.core.security import get_password_hash
from academy.models.catalog.course_model import Course, CourseType
from academy.models.catalog.exam_model import Exam, Question
from academy.models.catalog.formation_model import Formation, Part
from academy.models.user.user_model import User, UserRole
from academy.services.progression.state import (
    ExamEntry,
    FormationEntry,
    PartEntry,
    QuestionEntry,
)
from academy.services.progression.stores import InMemoryCatalogStore


def create_user(db, *, password: str | None = None, formations: Sequence[Formation] = (), **kwargs) -> User:
    defaults = {
        "first_name": "Jean",
        "last_name": "Dupont",
        "email": "user@example.com",
        "hashed_password": get_password_hash(password) if password else "x",
        "role": UserRole.ARBITRE,
        "is_active": True,
        "must_change_password": False,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    user.assigned_formations = list(formations)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _exam_questions(count: int) -> list[Question]:
    # La bonne réponse est toujours l'option 0.
    return [
        Question(text=f"Question {i + 1}", options=["bonne", "mauvaise", "autre"], correct_answer_index=0, order=i)
        for i in range(count)
    ]


def create_formation(
    db,
    *,
    title: str = "Formation",
    course_counts: Sequence[int] = (3, 2),
    passing_scores: Sequence[int] | None = None,
    questions_per_exam: int = 3,
) -> Formation:
    """Formation dont chaque partie ``i`` contient ``course_counts[i]`` articles."""
    passing_scores = passing_scores or [80] * len(course_counts)
    formation = Formation(title=title, description=f"Description de {title}")
    for part_index, (course_count, passing_score) in enumerate(zip(course_counts, passing_scores)):
        part = Part(
            title=f"Partie {part_index + 1}",
            order=part_index,
            exam=Exam(
                title=f"Examen - Partie {part_index + 1}",
                passing_score=passing_score,
                questions=_exam_questions(questions_per_exam),
            ),
        )
        for course_index in range(course_count):
            part.courses.append(
                Course(
                    title=f"Cours {part_index + 1}.{course_index + 1}",
                    order=course_index,
                    course_type=CourseType.ARTICLE,
                    content={"body": "Texte"},
                )
            )
        formation.parts.append(part)
    db.add(formation)
    db.commit()
    db.refresh(formation)
    return formation


def correct_answers(exam: Exam, *, wrong: int = 0) -> dict[int, int]:
    """Réponses à ``exam`` avec ``wrong`` erreurs sur les dernières questions."""
    answers = {}
    for index, question in enumerate(exam.questions):
        failed = index >= len(exam.questions) - wrong
        answers[question.id] = 1 if failed else question.correct_answer_index
    return answers


def build_catalog(course_counts: Sequence[int] = (3, 2), passing_scores: Sequence[int] | None = None):
    """Catalogue en mémoire: formation 1, parties 1..n, cours 101.., examens de 3 questions."""
    passing_scores = passing_scores or [80] * len(course_counts)
    parts, exams = [], []
    next_course_id = 101
    next_question_id = 1
    for index, (count, passing_score) in enumerate(zip(course_counts, passing_scores)):
        part_id = index + 1
        questions = tuple(
            QuestionEntry(id=next_question_id + q, text=f"Q{q}", options=("a", "b", "c"), correct_answer_index=0)
            for q in range(3)
        )
        next_question_id += 3
        exams.append(ExamEntry(id=part_id, title=f"Examen {part_id}", passing_score=passing_score, questions=questions))
        parts.append(
            PartEntry(
                id=part_id,
                title=f"Partie {part_id}",
                formation_id=1,
                exam_id=part_id,
                course_ids=tuple(range(next_course_id, next_course_id + count)),
            )
        )
        next_course_id += 100
    formation = FormationEntry(id=1, title="Formation", part_ids=tuple(p.id for p in parts))
    return InMemoryCatalogStore(formations=[formation], parts=parts, exams=exams)
