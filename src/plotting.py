"""DOT export of a computed family layout."""

import logging
from pathlib import Path

import pydot

from config import DEFAULT_CONFIG, LayoutConfig, NodeSizeSource, size_lookup
from family_tree import FamilyGraph
from graph import build_union_layout_graph
from models import LayoutResult

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0

FILL_COLORS = {"M": "lightblue", "F": "lightpink"}


def layout_to_dot(
    graph: FamilyGraph,
    result: LayoutResult,
    node_size: NodeSizeSource = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> pydot.Dot:
    """
    Convert a computed layout into a pydot graph with pinned node positions.

    Person nodes are placed at their computed centres (Graphviz y grows
    upwards, so y is negated). Family/union nodes are small points at the
    centre of their parents. Render it with `neato -n` to keep the positions.

    Args:
        graph: The family graph the layout was computed from
        result: Output of `layout.compute_layout`
        node_size: The same size source passed to the layout, if any
        config: The same spacing constants passed to the layout

    Returns:
        A pydot.Dot ready to be written
    """
    size = size_lookup(node_size, config)
    H = build_union_layout_graph(graph)

    P = pydot.Dot(graph_type="digraph")
    P.set("splines", "ortho")
    P.set("outputorder", "edgesfirst")

    centers: dict[str, tuple[float, float]] = {}
    for person_id, pos in result.positions.items():
        s = size(person_id)
        centers[person_id] = (pos.x + s.width / 2, pos.y + s.height / 2)

    for node, data in H.nodes(data=True):
        if data.get("node_type") != "person" or node not in centers:
            continue

        s = size(node)
        cx, cy = centers[node]
        birth_year = (data.get("birth_date") or "")[:4]
        death_year = (data.get("death_date") or "")[:4]
        label = data.get("person_name") or str(node)
        if birth_year or death_year:
            label = f"{label}\n{birth_year}-{death_year}"

        P.add_node(
            pydot.Node(
                str(node),
                label=label,
                shape="box",
                style="rounded,filled",
                fillcolor=FILL_COLORS.get(data.get("sex"), "lightgray"),
                fontsize="10",
                width=f"{s.width / POINTS_PER_INCH:.3f}",
                height=f"{s.height / POINTS_PER_INCH:.3f}",
                fixedsize="true",
                pos=f"{cx:.1f},{-cy:.1f}!",
            )
        )

    for node, data in H.nodes(data=True):
        if data.get("node_type") != "family":
            continue
        parents = [p for p in data.get("spouses", ()) if p in centers]
        if not parents:
            continue
        fx = sum(centers[p][0] for p in parents) / len(parents)
        fy = sum(centers[p][1] for p in parents) / len(parents)
        P.add_node(
            pydot.Node(
                str(node),
                shape="point",
                width="0.1",
                height="0.1",
                label="",
                pos=f"{fx:.1f},{-fy:.1f}!",
            )
        )

    added = {n.get_name().strip('"') for n in P.get_nodes()}
    for u, v, data in H.edges(data=True):
        if str(u) not in added or str(v) not in added:
            continue
        if data.get("edge_type") == "spouse_to_family":
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        elif data.get("edge_type") == "family_to_child":
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    return P


def write_dot(P: pydot.Dot, output_path: Path):
    """
    Write the graph to `output_path`. A .png/.svg/.pdf extension renders through
    Graphviz (neato, honouring pinned positions); anything else writes DOT source.
    """
    ext = output_path.suffix.lower().lstrip(".")
    if ext in ("png", "svg", "pdf"):
        P.write(str(output_path), prog=["neato", "-n"], format=ext)
    else:
        P.write(str(output_path), format="raw")
    logger.info("Layout written to %s", output_path)
