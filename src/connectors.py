"""Connector line geometry between placed persons."""

from collections.abc import Callable
import logging

from config import DEFAULT_CONFIG, LayoutConfig, NodeSizeSource, size_lookup
from family_tree import FamilyGraph
from models import NodeSize, Position, Segment, SegmentKind
from relationships import couple_key

logger = logging.getLogger(__name__)

# Horizontal jogs shorter than this are not drawn
ALIGNMENT_TOLERANCE = 1.0


def connectors(
    graph: FamilyGraph,
    positions: dict[str, Position],
    node_size: NodeSizeSource = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> list[Segment]:
    """
    Derive connector segments from computed positions.

    For every spouse pair (once per couple) a horizontal line joins the facing
    edges of the two nodes, and the couple's common children hang from the
    middle of that line. Children whose other parent is missing or not a
    registered spouse hang from the bottom centre of their one parent.

    Returns:
        Segments in drawing order
    """
    size = size_lookup(node_size, config)
    persons = graph.persons()
    segments: list[Segment] = []
    processed_pairs: set[tuple[str, str]] = set()

    for person_id, person in persons.items():
        for spouse_id in person.spouse_ids:
            if spouse_id not in persons:
                continue
            key = couple_key(person_id, spouse_id)
            if key in processed_pairs:
                continue
            processed_pairs.add(key)

            if person_id not in positions or spouse_id not in positions:
                continue

            if positions[person_id].x <= positions[spouse_id].x:
                left_id, right_id = person_id, spouse_id
            else:
                left_id, right_id = spouse_id, person_id
            left, right = positions[left_id], positions[right_id]
            left_size, right_size = size(left_id), size(right_id)

            y = min(left.y + left_size.height / 2, right.y + right_size.height / 2)
            left_edge = left.x + left_size.width
            segments.append(
                Segment(SegmentKind.SPOUSE, left_edge, y, right.x, y, (left_id, right_id))
            )

            couple = {left_id, right_id}
            common_children = [
                child_id
                for child_id in dict.fromkeys(graph.get_children(left_id) + graph.get_children(right_id))
                if {persons[child_id].father_id, persons[child_id].mother_id} == couple
            ]
            if common_children:
                _add_parent_child_segments(
                    segments, common_children, positions, size, config, (left_edge + right.x) / 2, y
                )

        single_parent_children = []
        for child_id in graph.get_children(person_id):
            child = persons.get(child_id)
            if child is None:
                continue
            other_parent_id = child.mother_id if child.father_id == person_id else child.father_id
            if other_parent_id not in persons or other_parent_id not in person.spouse_ids:
                single_parent_children.append(child_id)

        if single_parent_children and person_id in positions:
            parent_size = size(person_id)
            _add_parent_child_segments(
                segments,
                single_parent_children,
                positions,
                size,
                config,
                positions[person_id].x + parent_size.width / 2,
                positions[person_id].y + parent_size.height,
            )

    logger.info("Generated %d connector segments", len(segments))
    return segments


def _add_parent_child_segments(
    segments: list[Segment],
    children_ids: list[str],
    positions: dict[str, Position],
    size: Callable[[str], NodeSize],
    config: LayoutConfig,
    parent_x: float,
    parent_y: float,
):
    """Append the drop lines from (parent_x, parent_y) into each child's top centre."""
    placed = [cid for cid in children_ids if cid in positions]
    if not placed:
        return

    centers = sorted(
        ((cid, positions[cid].x + size(cid).width / 2, positions[cid].y) for cid in placed),
        key=lambda c: c[1],
    )

    if len(centers) == 1:
        child_id, center_x, top_y = centers[0]
        stub_y = top_y - config.connector_length
        segments.append(
            Segment(SegmentKind.PARENT_CHILD_VERTICAL, parent_x, parent_y, parent_x, stub_y, (child_id,))
        )
        if abs(parent_x - center_x) > ALIGNMENT_TOLERANCE:
            segments.append(
                Segment(
                    SegmentKind.PARENT_CHILD_HORIZONTAL, parent_x, stub_y, center_x, stub_y, (child_id,)
                )
            )
        segments.append(
            Segment(SegmentKind.PARENT_CHILD_VERTICAL, center_x, stub_y, center_x, top_y, (child_id,))
        )
        return

    group = tuple(placed)
    leftmost_x = centers[0][1]
    rightmost_x = centers[-1][1]
    middle_x = (leftmost_x + rightmost_x) / 2
    bus_y = min(top_y for _, _, top_y in centers) - config.connector_length

    segments.append(
        Segment(SegmentKind.PARENT_CHILD_VERTICAL, parent_x, parent_y, parent_x, bus_y, group)
    )
    if abs(parent_x - middle_x) > ALIGNMENT_TOLERANCE:
        segments.append(
            Segment(SegmentKind.PARENT_CHILD_HORIZONTAL, parent_x, bus_y, middle_x, bus_y, group)
        )
    segments.append(
        Segment(SegmentKind.SIBLING_HORIZONTAL, leftmost_x, bus_y, rightmost_x, bus_y, group)
    )
    for child_id, center_x, top_y in centers:
        segments.append(
            Segment(SegmentKind.PARENT_CHILD_VERTICAL, center_x, bus_y, center_x, top_y, (child_id,))
        )
