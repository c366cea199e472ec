"""Schémas Pydantic des cours et de leur contenu typé."""
from __future__ import annotations

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from academy.models.catalog.course_model import CourseType
from academy.schemas.catalog.question_schema import QuestionIn, QuestionPublic

_YOUTUBE_ID = re.compile(
    r"^.*(?:(?:youtu\.be/|v/|vi/|u/\w/|embed/|watch\?v=)|(?:shorts/))([^#&?]*).*"
)


class VideoContent(BaseModel):
    type: Literal["VIDEO"] = "VIDEO"
    url: str = Field(..., min_length=1)

    @property
    def youtube_video_id(self) -> Optional[str]:
        """Identifiant YouTube (11 caractères) extrait de l'URL, sinon ``None``."""
        match = _YOUTUBE_ID.match(self.url)
        if match and len(match.group(1)) == 11:
            return match.group(1)
        return None


class ArticleContent(BaseModel):
    type: Literal["ARTICLE"] = "ARTICLE"
    body: str


class PdfContent(BaseModel):
    type: Literal["PDF"] = "PDF"
    url: str = Field(..., min_length=1)


CourseContent = Annotated[
    Union[VideoContent, ArticleContent, PdfContent],
    Field(discriminator="type"),
]

_course_content_adapter: TypeAdapter[CourseContent] = TypeAdapter(CourseContent)


def parse_course_content(course_type: CourseType | str, content: Dict[str, Any]) -> CourseContent:
    """Valide le JSON stocké en base contre la variante correspondant à ``course_type``."""
    return _course_content_adapter.validate_python({**(content or {}), "type": CourseType(course_type).value})


def dump_course_content(content: CourseContent) -> Dict[str, Any]:
    """Forme stockée en base: la charge utile sans le discriminant (porté par ``course_type``)."""
    return content.model_dump(mode="json", exclude={"type"})


class CourseCreate(BaseModel):
    title: str = "Nouveau cours"
    content: CourseContent = Field(default_factory=lambda: ArticleContent(body="Contenu à rédiger..."))
    quick_test_questions: List[QuestionIn] = Field(default_factory=list)


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[CourseContent] = None
    quick_test_questions: Optional[List[QuestionIn]] = None

    @model_validator(mode="after")
    def _strip_title(self) -> "CourseUpdate":
        if self.title is not None:
            self.title = self.title.strip() or None
        return self


class CourseSummary(BaseModel):
    id: int
    title: str
    course_type: CourseType

    class Config:
        from_attributes = True


class CourseRead(CourseSummary):
    """Cours tel que présenté à l'apprenant (sans les bonnes réponses du test rapide)."""

    content: CourseContent
    youtube_video_id: Optional[str] = None
    quick_test_questions: List[QuestionPublic] = Field(default_factory=list)


class CourseAdminRead(CourseSummary):
    content: CourseContent
    quick_test_questions: List[QuestionIn] = Field(default_factory=list)


class QuickTestSubmission(BaseModel):
    answers: Dict[int, int] = Field(default_factory=dict)


class QuickTestResult(BaseModel):
    course_id: int
    results: Dict[int, bool]
    all_correct: bool
