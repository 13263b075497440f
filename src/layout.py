"""Coordinate layout of persons by generation level."""

from collections.abc import Callable
from functools import cmp_to_key
import logging

from config import DEFAULT_CONFIG, LayoutConfig, NodeSizeSource, size_lookup
from connectors import connectors
from family_tree import FamilyGraph
from generations import assign_generation_levels
from models import LayoutResult, NodeSize, Person, Position
from relationships import normalize

logger = logging.getLogger(__name__)


def compare_siblings(a: Person, b: Person) -> int:
    """Order by birth_order when both have one, then by birth_date, then by id."""
    if a.birth_order is not None and b.birth_order is not None and a.birth_order != b.birth_order:
        return -1 if a.birth_order < b.birth_order else 1
    if a.birth_date and b.birth_date and a.birth_date != b.birth_date:
        return -1 if a.birth_date < b.birth_date else 1
    if a.id == b.id:
        return 0
    return -1 if str(a.id) < str(b.id) else 1


def group_by_level(graph: FamilyGraph, levels: dict[str, int]) -> dict[int, list[str]]:
    """Group person ids by level, each group sorted with `compare_siblings`."""
    persons = graph.persons()
    groups: dict[int, list[str]] = {}
    for person_id, person in persons.items():
        level = levels.get(person_id)
        if level is None:
            logger.warning("Generation level of %s (%s) unknown, leaving it out", person_id, person.name)
            continue
        groups.setdefault(level, []).append(person_id)

    key = cmp_to_key(compare_siblings)
    return {
        level: sorted(ids, key=lambda pid: key(persons[pid]))
        for level, ids in sorted(groups.items())
    }


def _y_positions(
    groups: dict[int, list[str]], size: Callable[[str], NodeSize], config: LayoutConfig
) -> dict[str, float]:
    y_positions: dict[str, float] = {}
    current_y = 0.0
    for level in sorted(groups):
        person_ids = groups[level]
        for person_id in person_ids:
            y_positions[person_id] = current_y
        tallest = max([config.node_height] + [size(pid).height for pid in person_ids])
        current_y += tallest + config.vertical_spacing
    return y_positions


def resolve_overlaps(
    person_ids: list[str],
    positions: dict[str, Position],
    size: Callable[[str], NodeSize],
    min_spacing: float,
):
    """
    Single left-to-right pass: whenever a node starts less than `min_spacing`
    after its left neighbour ends, push it and everything to its right over.
    """
    for i in range(len(person_ids) - 1):
        current_id = person_ids[i]
        next_id = person_ids[i + 1]
        if current_id not in positions or next_id not in positions:
            continue

        current_right = positions[current_id].x + size(current_id).width
        next_left = positions[next_id].x
        if current_right + min_spacing > next_left:
            offset = current_right + min_spacing - next_left
            for shift_id in person_ids[i + 1 :]:
                if shift_id in positions:
                    positions[shift_id].x += offset


def layout(
    graph: FamilyGraph,
    levels: dict[str, int],
    node_size: NodeSizeSource = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> dict[str, Position]:
    """
    Compute the top-left position of every person that has a level.

    All persons of one level share a y. The first level is laid out left to
    right; in later levels a person is centred under the mean centre of their
    already placed parents, otherwise placed after the previous node of the
    level. A final overlap pass per level keeps neighbours apart.

    Args:
        graph: A normalized family graph
        levels: Person id -> generation level
        node_size: Measured node sizes (callable or mapping); defaults from config
        config: Spacing constants

    Returns:
        Person id -> Position
    """
    if len(graph) == 0:
        logger.warning("Empty family graph, skipping layout")
        return {}

    size = size_lookup(node_size, config)
    groups = group_by_level(graph, levels)
    if not groups:
        return {}

    y_positions = _y_positions(groups, size, config)
    positions: dict[str, Position] = {pid: Position(0.0, y) for pid, y in y_positions.items()}
    placed: set[str] = set()

    ordered_levels = list(groups)
    current_x = 0.0
    for person_id in groups[ordered_levels[0]]:
        positions[person_id].x = current_x
        placed.add(person_id)
        current_x += size(person_id).width + config.horizontal_spacing

    for level in ordered_levels[1:]:
        person_ids = groups[level]
        current_x = 0.0
        for person_id in person_ids:
            person = graph.get_person(person_id)
            width = size(person_id).width

            parent_centers = [
                positions[parent_id].x + size(parent_id).width / 2
                for parent_id in person.parent_ids()
                if parent_id in placed
            ]
            if parent_centers:
                positions[person_id].x = sum(parent_centers) / len(parent_centers) - width / 2
            else:
                positions[person_id].x = current_x

            placed.add(person_id)
            current_x = positions[person_id].x + width + config.horizontal_spacing

        resolve_overlaps(person_ids, positions, size, config.horizontal_spacing)

    logger.info("Placed %d persons on %d levels", len(positions), len(groups))
    return positions


def compute_layout(
    graph: FamilyGraph,
    node_size: NodeSizeSource = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    requeue_lowered: bool = True,
) -> LayoutResult:
    """Run the whole pipeline: normalize (if needed), assign levels, place nodes, draw connectors."""
    if graph.needs_normalization:
        normalize(graph)

    assignment = assign_generation_levels(graph, requeue_lowered=requeue_lowered)
    positions = layout(graph, assignment.levels, node_size, config)
    segments = connectors(graph, positions, node_size, config)
    return LayoutResult(
        levels=assignment.levels,
        positions=positions,
        connectors=segments,
        conflicts=assignment.conflicts,
    )
