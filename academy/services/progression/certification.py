"""Certificates (attestations) earned by passing a part's exam."""

from __future__ import annotations

from typing import List, Mapping

from academy.services.progression.state import FormationProgressRecord, PartEntry
from academy.services.progression.stores import CatalogStore


def certified_parts(
    progress_by_formation: Mapping[int, FormationProgressRecord],
    catalog: CatalogStore,
) -> List[PartEntry]:
    """Every part with a passed exam, once each, across all the user's formations.

    Attempts pointing at parts that no longer exist in the catalog are
    skipped.
    """
    seen: set[int] = set()
    certified: List[PartEntry] = []
    for formation_id in sorted(progress_by_formation):
        for attempt in progress_by_formation[formation_id].exam_attempts:
            if not attempt.passed or attempt.part_id in seen:
                continue
            part = catalog.find_part(attempt.part_id)
            if part is None:
                continue
            seen.add(part.id)
            certified.append(part)
    return certified
