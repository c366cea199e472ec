"""Back office SQLAdmin: consultation et correction manuelle des données."""

from __future__ import annotations

import json
from typing import Any

from markupsafe import Markup, escape
from sqladmin import ModelView

from academy.models.catalog.course_model import Course
from academy.models.catalog.exam_model import Exam, Question
from academy.models.catalog.formation_model import Formation, Part
from academy.models.progress.formation_progress_model import ExamAttempt, FormationProgress
from academy.models.user.user_model import User


def _json_preview(value: Any, *, max_chars: int = 160) -> Markup:
    """Render JSON content as a trimmed <pre> block for the admin."""
    if value in (None, ""):
        return Markup("<span style='color:#9ca3af;'>-</span>")

    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, indent=2)
    else:
        text = str(value)

    if len(text) > max_chars:
        text = text[:max_chars] + "…"

    return Markup(
        "<pre style='max-width:520px; white-space:pre-wrap; margin:0; font-size:12px;'>{}</pre>"
    ).format(escape(text))


def _json_full(value: Any) -> Markup:
    return _json_preview(value, max_chars=10000)


class UserAdmin(ModelView, model=User):
    name = "Utilisateur"
    name_plural = "Utilisateurs"
    icon = "fa-solid fa-user"
    category = "Comptes"
    column_list = [
        User.id,
        User.last_name,
        User.first_name,
        User.email,
        User.login_id,
        User.role,
        User.is_active,
        User.must_change_password,
        User.created_at,
        User.last_login_at,
    ]
    column_searchable_list = [User.email, User.login_id, User.last_name]
    column_sortable_list = [User.created_at, User.last_login_at]
    column_default_sort = [(User.created_at, True)]
    column_labels = {
        User.must_change_password: "Mot de passe à changer",
        User.last_login_at: "Dernière connexion",
    }
    column_details_exclude_list = [User.hashed_password]
    column_formatters = {User.role: lambda m, _: m.role.value if m.role else ""}
    form_excluded_columns = ["hashed_password", "formation_progress"]
    can_export = True
    page_size = 50


class FormationAdmin(ModelView, model=Formation):
    name = "Formation"
    name_plural = "Formations"
    icon = "fa-solid fa-book"
    category = "Catalogue"
    column_list = [Formation.id, Formation.title, Formation.image_url]
    column_searchable_list = [Formation.title]
    form_excluded_columns = ["assigned_users"]


class PartAdmin(ModelView, model=Part):
    name = "Partie"
    name_plural = "Parties"
    icon = "fa-solid fa-layer-group"
    category = "Catalogue"
    column_list = [Part.id, Part.formation, Part.title, Part.order, Part.exam]


class CourseAdmin(ModelView, model=Course):
    name = "Cours"
    name_plural = "Cours"
    icon = "fa-solid fa-chalkboard"
    category = "Catalogue"
    column_list = [Course.id, Course.part, Course.title, Course.order, Course.course_type, Course.content]
    column_formatters = {Course.content: lambda m, _: _json_preview(m.content)}
    column_formatters_detail = {Course.content: lambda m, _: _json_full(m.content)}


class ExamAdmin(ModelView, model=Exam):
    name = "Examen"
    name_plural = "Examens"
    icon = "fa-solid fa-file-signature"
    category = "Catalogue"
    column_list = [Exam.id, Exam.title, Exam.passing_score]


class QuestionAdmin(ModelView, model=Question):
    name = "Question"
    name_plural = "Questions"
    icon = "fa-solid fa-circle-question"
    category = "Catalogue"
    column_list = [Question.id, Question.exam, Question.course, Question.text, Question.correct_answer_index]
    column_formatters_detail = {Question.options: lambda m, _: _json_full(m.options)}


class FormationProgressAdmin(ModelView, model=FormationProgress):
    name = "Progression"
    name_plural = "Progressions"
    icon = "fa-solid fa-chart-line"
    category = "Suivi"
    column_list = [
        FormationProgress.id,
        FormationProgress.user,
        FormationProgress.formation_id,
        FormationProgress.completed_course_ids,
        FormationProgress.version,
        FormationProgress.updated_at,
    ]
    column_formatters = {
        FormationProgress.completed_course_ids: lambda m, _: _json_preview(m.completed_course_ids),
    }
    column_default_sort = [(FormationProgress.updated_at, True)]


class ExamAttemptAdmin(ModelView, model=ExamAttempt):
    name = "Tentative d'examen"
    name_plural = "Tentatives d'examen"
    icon = "fa-solid fa-list-check"
    category = "Suivi"
    column_list = [
        ExamAttempt.id,
        ExamAttempt.progress,
        ExamAttempt.part_id,
        ExamAttempt.attempts,
        ExamAttempt.last_score,
        ExamAttempt.passed,
    ]


ADMIN_VIEWS = [
    UserAdmin,
    FormationAdmin,
    PartAdmin,
    CourseAdmin,
    ExamAdmin,
    QuestionAdmin,
    FormationProgressAdmin,
    ExamAttemptAdmin,
]
