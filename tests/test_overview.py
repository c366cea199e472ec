from academy.models.user.user_model import UserRole
from academy.services.progression import certified_parts, overall_progress, visible_formations
from academy.services.progression.state import (
    ExamAttemptRecord,
    FormationEntry,
    FormationProgressRecord,
    PartEntry,
)
from academy.services.progression.stores import InMemoryCatalogStore


def _catalog():
    parts = [
        PartEntry(id=1, title="P1", formation_id=1, exam_id=1, course_ids=(1, 2, 3)),
        PartEntry(id=2, title="P2", formation_id=2, exam_id=2, course_ids=(4,)),
        PartEntry(id=3, title="P3", formation_id=3, exam_id=3),
    ]
    formations = [
        FormationEntry(id=1, title="F1", part_ids=(1,)),
        FormationEntry(id=2, title="F2", part_ids=(2,)),
        FormationEntry(id=3, title="F3", part_ids=(3,)),
    ]
    return InMemoryCatalogStore(formations=formations, parts=parts)


def test_learners_only_see_assigned_formations():
    catalog = _catalog()
    assert [f.id for f in visible_formations(UserRole.CLUB, [2], catalog)] == [2]
    assert [f.id for f in visible_formations(UserRole.FORMATEUR, [], catalog)] == [1, 2, 3]


def test_overall_progress_is_weighted_by_course_count():
    catalog = _catalog()
    formations = visible_formations(UserRole.ARBITRE, [1, 2], catalog)
    progress = {
        1: FormationProgressRecord(completed_course_ids=frozenset({1})),
        2: FormationProgressRecord(completed_course_ids=frozenset({4})),
    }
    result = overall_progress(UserRole.ARBITRE, formations, catalog, progress)
    # 2 cours sur 4 (et non la moyenne de 33% et 100%).
    assert result.percentage == 50
    assert result.total_courses == 4
    assert result.completed_courses == 2


def test_overall_progress_is_zero_for_privileged_roles():
    catalog = _catalog()
    progress = {1: FormationProgressRecord(completed_course_ids=frozenset({1, 2, 3}))}
    result = overall_progress(UserRole.ADMINISTRATEUR, catalog.list_formations(), catalog, progress)
    assert result.percentage == 0


def test_overall_progress_without_courses_is_zero():
    catalog = _catalog()
    formations = visible_formations(UserRole.EMPLOYE, [3], catalog)
    assert overall_progress(UserRole.EMPLOYE, formations, catalog, {}).percentage == 0


def test_certified_parts_skips_failed_and_deleted_parts():
    catalog = _catalog()
    progress = {
        1: FormationProgressRecord(exam_attempts=(ExamAttemptRecord(1, attempts=1, last_score=90, passed=True),)),
        2: FormationProgressRecord(
            exam_attempts=(
                ExamAttemptRecord(2, attempts=2, last_score=40),
                ExamAttemptRecord(99, attempts=1, last_score=100, passed=True),
            )
        ),
    }
    assert [part.id for part in certified_parts(progress, catalog)] == [1]
