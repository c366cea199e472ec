# Fichier: academy/crud/catalog_crud.py
"""Accès au catalogue: lecture pour le moteur de progression et édition par l'administration."""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from academy.core.config import settings
from academy.crud.progress_crud import delete_progress_for_formation
from academy.models.catalog.course_model import Course, CourseType
from academy.models.catalog.exam_model import Exam, Question
from academy.models.catalog.formation_model import Formation, Part
from academy.schemas.catalog.course_schema import (
    CourseCreate,
    CourseUpdate,
    dump_course_content,
)
from academy.schemas.catalog.formation_schema import (
    ExamUpdate,
    FormationCreate,
    FormationUpdate,
    PartCreate,
    PartUpdate,
)
from academy.schemas.catalog.question_schema import QuestionIn
from academy.services.errors import ContentNotFound
from academy.services.progression.state import (
    CourseEntry,
    ExamEntry,
    FormationEntry,
    PartEntry,
    QuestionEntry,
)

logger = logging.getLogger(__name__)


# --- Conversions ORM -> entrées immuables ---

def _question_entry(question: Question) -> QuestionEntry:
    return QuestionEntry(
        id=question.id,
        text=question.text,
        options=tuple(question.options or ()),
        correct_answer_index=question.correct_answer_index,
    )


def _formation_entry(formation: Formation) -> FormationEntry:
    return FormationEntry(
        id=formation.id,
        title=formation.title,
        description=formation.description or "",
        part_ids=tuple(formation.part_ids),
        image_url=formation.image_url,
    )


def _part_entry(part: Part) -> PartEntry:
    return PartEntry(
        id=part.id,
        title=part.title,
        formation_id=part.formation_id,
        exam_id=part.exam_id,
        course_ids=tuple(part.course_ids),
    )


class SqlCatalogStore:
    """Lecture du catalogue depuis la base, avec un cache propre à la requête.

    Une instance vit le temps d'une requête: le catalogue ne change pas
    pendant ce temps, les entrées déjà converties sont donc réutilisées.
    """

    def __init__(self, db: Session):
        self.db = db
        self._formations: Dict[int, FormationEntry] = {}
        self._parts: Dict[int, PartEntry] = {}
        self._courses: Dict[int, CourseEntry] = {}
        self._exams: Dict[int, ExamEntry] = {}

    def get_formation(self, formation_id: int) -> FormationEntry:
        if formation_id not in self._formations:
            formation = self.db.get(Formation, formation_id)
            if formation is None:
                raise ContentNotFound("formation_not_found")
            self._formations[formation_id] = _formation_entry(formation)
        return self._formations[formation_id]

    def find_part(self, part_id: int) -> Optional[PartEntry]:
        if part_id not in self._parts:
            part = self.db.get(Part, part_id)
            if part is None:
                return None
            self._parts[part_id] = _part_entry(part)
        return self._parts[part_id]

    def get_part(self, part_id: int) -> PartEntry:
        part = self.find_part(part_id)
        if part is None:
            raise ContentNotFound("part_not_found")
        return part

    def get_course(self, course_id: int) -> CourseEntry:
        if course_id not in self._courses:
            course = self.db.get(Course, course_id)
            if course is None:
                raise ContentNotFound("course_not_found")
            self._courses[course_id] = CourseEntry(
                id=course.id,
                title=course.title,
                course_type=CourseType(course.course_type),
                content=course.payload,
                quick_test_questions=tuple(_question_entry(q) for q in course.quick_test_questions),
            )
        return self._courses[course_id]

    def get_exam(self, exam_id: int) -> ExamEntry:
        if exam_id not in self._exams:
            exam = self.db.get(Exam, exam_id)
            if exam is None:
                raise ContentNotFound("exam_not_found")
            self._exams[exam_id] = ExamEntry(
                id=exam.id,
                title=exam.title,
                passing_score=exam.passing_score,
                questions=tuple(_question_entry(q) for q in exam.questions),
            )
        return self._exams[exam_id]

    def get_question(self, question_id: int) -> QuestionEntry:
        question = self.db.get(Question, question_id)
        if question is None:
            raise ContentNotFound("question_not_found")
        return _question_entry(question)

    def list_formations(self) -> List[FormationEntry]:
        formations = (
            self.db.query(Formation)
            .options(selectinload(Formation.parts))
            .order_by(Formation.id.asc())
            .all()
        )
        entries = []
        for formation in formations:
            entry = self._formations.setdefault(formation.id, _formation_entry(formation))
            entries.append(entry)
        return entries


# --- Lecture des objets ORM (administration) ---

def get_formation(db: Session, formation_id: int) -> Formation:
    formation = db.get(Formation, formation_id)
    if formation is None:
        raise ContentNotFound("formation_not_found")
    return formation


def get_part(db: Session, part_id: int) -> Part:
    part = db.get(Part, part_id)
    if part is None:
        raise ContentNotFound("part_not_found")
    return part


def get_course(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise ContentNotFound("course_not_found")
    return course


def get_exam(db: Session, exam_id: int) -> Exam:
    exam = db.get(Exam, exam_id)
    if exam is None:
        raise ContentNotFound("exam_not_found")
    return exam


def list_formations(db: Session) -> List[Formation]:
    return db.query(Formation).order_by(Formation.id.asc()).all()


# --- Questions ---

def _build_questions(questions: List[QuestionIn]) -> List[Question]:
    return [
        Question(
            text=q.text,
            options=list(q.options),
            correct_answer_index=q.correct_answer_index,
            order=index,
        )
        for index, q in enumerate(questions)
    ]


# --- Formations ---

def create_formation(db: Session, formation_in: FormationCreate) -> Formation:
    formation = Formation(
        title=formation_in.title,
        description=formation_in.description,
        image_url=formation_in.image_url,
    )
    db.add(formation)
    db.commit()
    db.refresh(formation)
    logger.info("Formation %s créée: %s", formation.id, formation.title)
    return formation


def update_formation(db: Session, formation_id: int, formation_in: FormationUpdate) -> Formation:
    formation = get_formation(db, formation_id)
    for field, value in formation_in.model_dump(exclude_unset=True).items():
        setattr(formation, field, value)
    db.commit()
    db.refresh(formation)
    return formation


def delete_formation(db: Session, formation_id: int) -> None:
    """Supprime la formation, ses parties, cours, examens et les progressions associées."""
    formation = get_formation(db, formation_id)
    removed = delete_progress_for_formation(db, formation_id)
    db.delete(formation)
    db.commit()
    logger.info("Formation %s supprimée (%s progressions effacées)", formation_id, removed)


# --- Parties ---

def create_part(db: Session, formation_id: int, part_in: Optional[PartCreate] = None) -> Part:
    """Ajoute une partie en fin de formation, avec son examen vide."""
    formation = get_formation(db, formation_id)
    title = (part_in or PartCreate()).title
    exam = Exam(title=f"Examen - {title}", passing_score=settings.DEFAULT_PASSING_SCORE)
    next_order = max((p.order for p in formation.parts), default=-1) + 1
    part = Part(title=title, order=next_order, exam=exam)
    formation.parts.append(part)
    db.commit()
    db.refresh(part)
    logger.info("Partie %s ajoutée à la formation %s", part.id, formation_id)
    return part


def update_part(db: Session, part_id: int, part_in: PartUpdate) -> Part:
    part = get_part(db, part_id)
    if part_in.title is not None:
        part.title = part_in.title
    db.commit()
    db.refresh(part)
    return part


def delete_part(db: Session, part_id: int) -> None:
    part = get_part(db, part_id)
    db.delete(part)
    db.commit()
    logger.info("Partie %s supprimée avec ses cours et son examen", part_id)


# --- Cours ---

def create_course(db: Session, part_id: int, course_in: Optional[CourseCreate] = None) -> Course:
    part = get_part(db, part_id)
    course_in = course_in or CourseCreate()
    next_order = max((c.order for c in part.courses), default=-1) + 1
    course = Course(
        title=course_in.title,
        order=next_order,
        course_type=CourseType(course_in.content.type),
        content=dump_course_content(course_in.content),
        quick_test_questions=_build_questions(course_in.quick_test_questions),
    )
    part.courses.append(course)
    db.commit()
    db.refresh(course)
    return course


def update_course(db: Session, course_id: int, course_in: CourseUpdate) -> Course:
    course = get_course(db, course_id)
    if course_in.title is not None:
        course.title = course_in.title
    if course_in.content is not None:
        course.course_type = CourseType(course_in.content.type)
        course.content = dump_course_content(course_in.content)
    if course_in.quick_test_questions is not None:
        course.quick_test_questions = _build_questions(course_in.quick_test_questions)
    db.commit()
    db.refresh(course)
    return course


def delete_course(db: Session, course_id: int) -> None:
    course = get_course(db, course_id)
    db.delete(course)
    db.commit()


# --- Examens ---

def update_exam(db: Session, part_id: int, exam_in: ExamUpdate) -> Exam:
    part = get_part(db, part_id)
    exam = part.exam
    if exam_in.title is not None:
        exam.title = exam_in.title
    if exam_in.passing_score is not None:
        exam.passing_score = exam_in.passing_score
    if exam_in.questions is not None:
        exam.questions = _build_questions(exam_in.questions)
    db.commit()
    db.refresh(exam)
    return exam
