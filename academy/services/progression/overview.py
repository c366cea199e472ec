from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping

from academy.models.user.user_model import UserRole
from academy.services.progression.gating import count_courses, round_half_up_percentage
from academy.services.progression.state import EMPTY_PROGRESS, FormationEntry, FormationProgressRecord
from academy.services.progression.stores import CatalogStore, parts_of


@dataclass(frozen=True, slots=True)
class OverallProgress:
    percentage: int
    total_courses: int
    completed_courses: int


def visible_formations(
    role: UserRole,
    assigned_formation_ids: Iterable[int],
    catalog: CatalogStore,
) -> List[FormationEntry]:
    """Administrateurs et formateurs voient tout; les apprenants leurs seules affectations."""
    formations = catalog.list_formations()
    if UserRole(role).is_privileged:
        return formations
    assigned = set(assigned_formation_ids)
    return [formation for formation in formations if formation.id in assigned]


def overall_progress(
    role: UserRole,
    formations: Iterable[FormationEntry],
    catalog: CatalogStore,
    progress_by_formation: Mapping[int, FormationProgressRecord],
) -> OverallProgress:
    """Aggregate over formations: summed course counts, rounded once at the end.

    Privileged roles are not learners and always report 0.
    """
    if UserRole(role).is_privileged:
        return OverallProgress(percentage=0, total_courses=0, completed_courses=0)

    total = 0
    completed = 0
    for formation in formations:
        progress = progress_by_formation.get(formation.id, EMPTY_PROGRESS)
        formation_completed, formation_total = count_courses(parts_of(catalog, formation), progress)
        total += formation_total
        completed += formation_completed

    percentage = round_half_up_percentage(completed, total) if total else 0
    return OverallProgress(percentage=percentage, total_courses=total, completed_courses=completed)
