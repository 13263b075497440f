"""Breadth-first assignment of generation levels."""

from collections import deque
from dataclasses import dataclass, field
import logging

from family_tree import FamilyGraph
from models import LevelConflict

logger = logging.getLogger(__name__)

# Each node may be dequeued at most VISIT_CAP_FACTOR * N times
VISIT_CAP_FACTOR = 3


@dataclass
class LevelAssignment:
    levels: dict[str, int]
    conflicts: list[LevelConflict] = field(default_factory=list)
    unreachable: list[str] = field(default_factory=list)  # Defaulted to level 0
    capped: list[str] = field(default_factory=list)  # Hit the visit cap


def assign_generation_levels(graph: FamilyGraph, requeue_lowered: bool = True) -> LevelAssignment:
    """
    Assign an integer generation level to every person.

    Roots start at 0, children get their parent's level + 1 and spouses share a
    level. A child already holding a different level keeps it (first assignment
    wins). Spouses holding different levels are both pulled down to the smaller
    one, and whichever side was lowered is queued again so its descendants
    follow; queue entries carrying a level that has since been lowered are
    dropped. With `requeue_lowered=False` the current node is lowered in place
    without being queued again and every queue entry is processed as queued.

    Termination on cyclic data is guaranteed by a per-node dequeue cap of 3 * N.
    Persons never reached from a root get level 0.

    Args:
        graph: A normalized family graph
        requeue_lowered: Re-enqueue the current node when a spouse lowers it

    Returns:
        LevelAssignment with the levels plus diagnostics
    """
    persons = graph.persons()
    result = LevelAssignment(levels={})
    if not persons:
        return result

    levels = result.levels
    max_visits = len(persons) * VISIT_CAP_FACTOR
    visits: dict[str, int] = {}
    queue: deque[tuple[str, int]] = deque()

    def can_enqueue(person_id: str) -> bool:
        return visits.get(person_id, 0) < max_visits

    for root_id in graph.get_root_nodes():
        levels[root_id] = 0
        queue.append((root_id, 0))

    while queue:
        current_id, current_level = queue.popleft()

        # Superseded by a lower level queued after this entry
        if requeue_lowered and levels.get(current_id) != current_level:
            continue

        visits[current_id] = visits.get(current_id, 0) + 1
        if visits[current_id] > max_visits:
            if current_id not in result.capped:
                logger.warning(
                    "Node %s visited %d times, possible loop; not propagating further",
                    current_id,
                    visits[current_id],
                )
                result.capped.append(current_id)
            continue

        current = persons.get(current_id)
        if current is None:
            continue

        expected_child_level = current_level + 1
        for child_id in graph.get_children(current_id):
            if child_id not in persons:
                continue
            child_level = levels.get(child_id)
            if child_level is None:
                levels[child_id] = expected_child_level
                if can_enqueue(child_id):
                    queue.append((child_id, expected_child_level))
            elif child_level != expected_child_level:
                logger.warning(
                    "Level mismatch for child %s: keeping %d, parent %s implies %d",
                    child_id,
                    child_level,
                    current_id,
                    expected_child_level,
                )
                result.conflicts.append(
                    LevelConflict(child_id, child_level, expected_child_level, current_id, "child")
                )

        lowered_self = False
        for spouse_id in current.spouse_ids:
            if spouse_id not in persons:
                continue
            spouse_level = levels.get(spouse_id)
            if spouse_level is None:
                levels[spouse_id] = current_level
                if can_enqueue(spouse_id):
                    queue.append((spouse_id, current_level))
            elif spouse_level != current_level:
                new_level = min(current_level, spouse_level)
                if new_level < spouse_level:
                    result.conflicts.append(
                        LevelConflict(spouse_id, new_level, spouse_level, current_id, "spouse")
                    )
                    levels[spouse_id] = new_level
                    logger.debug("Lowered spouse %s from %d to %d", spouse_id, spouse_level, new_level)
                    if can_enqueue(spouse_id):
                        queue.append((spouse_id, new_level))
                else:
                    result.conflicts.append(
                        LevelConflict(current_id, new_level, current_level, spouse_id, "spouse")
                    )
                    levels[current_id] = new_level
                    logger.debug("Lowered %s from %d to %d", current_id, current_level, new_level)
                    if requeue_lowered:
                        current_level = new_level
                        lowered_self = True

        if lowered_self and can_enqueue(current_id):
            queue.append((current_id, current_level))

    for person_id in persons:
        if person_id not in levels:
            levels[person_id] = 0
            result.unreachable.append(person_id)
    if result.unreachable:
        logger.warning(
            "%d persons unreachable from any root, defaulted to level 0: %s",
            len(result.unreachable),
            result.unreachable,
        )

    return result


def assign_levels(graph: FamilyGraph) -> dict[str, int]:
    """Map of person id -> generation level."""
    return assign_generation_levels(graph).levels
