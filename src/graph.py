"""NetworkX views of a family graph."""

import itertools

import networkx as nx

from family_tree import FamilyGraph
from relationships import couple_key, normalize


def build_graph(graph: FamilyGraph) -> nx.DiGraph:
    """
    Build a NetworkX directed graph with PARENT_OF (parent -> child) and
    SPOUSE_OF edges between stored persons. Dangling references are left out.
    """
    G = nx.DiGraph()
    persons = graph.persons()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for person_id, person in persons.items():
        G.add_node(
            person_id,
            person_name=person.name,
            sex=person.gender.value,
            birth_date=person.birth_date,
            death_date=person.death_date,
        )

    for person_id, person in persons.items():
        for parent_id in person.parent_ids():
            if parent_id in persons:
                G.add_edge(parent_id, person_id, relationship_type="PARENT_OF")
        for spouse_id in person.spouse_ids:
            if spouse_id in persons:
                G.add_edge(person_id, spouse_id, relationship_type="SPOUSE_OF")

    return G


def build_parent_graph(graph: FamilyGraph) -> nx.DiGraph:
    """Only the PARENT_OF edges (parent -> child), with every person as a node."""
    G = build_graph(graph)
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"
    ]
    P = nx.DiGraph()
    P.add_nodes_from(G.nodes(data=True))
    P.add_edges_from(parent_edges)
    return P


def get_ego_graph(graph: FamilyGraph, center_id: str, radius: int = 2) -> FamilyGraph:
    """
    Extract the persons within `radius` relationship steps of a center person.

    Args:
        graph: The full family graph
        center_id: The person ID to center the subgraph on
        radius: Maximum distance from center (default 2)

    Returns:
        A new, normalized FamilyGraph holding only those persons. Links to
        persons outside the radius are kept as dangling references.
    """
    if center_id not in graph:
        raise ValueError(f"Person ID {center_id} not found in graph")

    # Use undirected view for ego graph to capture both directions
    # (parents, children, spouses all within radius)
    undirected = build_graph(graph).to_undirected()
    ego = nx.ego_graph(undirected, center_id, radius=radius)

    sub = FamilyGraph(title=graph.title, description=graph.description)
    for person_id, person in graph.persons().items():
        if person_id in ego:
            sub.add_person(person)
    return normalize(sub)


def build_union_layout_graph(graph: FamilyGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Creates "family nodes" (union nodes) that connect spouse pairs to their
    children, so all children of a couple hang from one point. Children with a
    single known parent, or whose parents are not registered spouses, get a
    family node of their own parent(s).

    Returns:
        A graph with node_type "person" / "family" and edge_type
        "spouse_to_family" / "family_to_child"
    """
    G = build_graph(graph)
    H = nx.DiGraph()

    # Copy person nodes with their attributes
    for n, data in G.nodes(data=True):
        H.add_node(n, node_type="person", **data)

    # Collect spouse pairs (avoid duplicates by sorting)
    spouse_pairs: list[tuple] = []
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == "SPOUSE_OF":
            pair = couple_key(u, v)
            if pair not in spouse_pairs:
                spouse_pairs.append(pair)

    # Map spouse pair -> family node id
    fam_for_pair: dict[tuple, str] = {}
    for a, b in spouse_pairs:
        fam_id = f"FAM_{a}_{b}"
        fam_for_pair[(a, b)] = fam_id
        H.add_node(fam_id, node_type="family", spouses=(a, b))
        H.add_edge(a, fam_id, edge_type="spouse_to_family")
        H.add_edge(b, fam_id, edge_type="spouse_to_family")

    for child in G.nodes():
        parents = [
            p for p in G.predecessors(child) if G.edges[p, child].get("relationship_type") == "PARENT_OF"
        ]
        if not parents:
            continue

        fam_id = None
        if len(parents) >= 2:
            for p1, p2 in itertools.combinations(parents, 2):
                pair = couple_key(p1, p2)
                if pair in fam_for_pair:
                    fam_id = fam_for_pair[pair]
                    break

        # If no spouse pair found, create a single-parent family node
        if fam_id is None:
            fam_id = f"FAM_{'_'.join(sorted(parents, key=str))}"
            if fam_id not in H:
                H.add_node(fam_id, node_type="family", spouses=tuple(parents))
                for p in parents:
                    H.add_edge(p, fam_id, edge_type="spouse_to_family")

        # Child hangs from family node
        H.add_edge(fam_id, child, edge_type="family_to_child")

    return H
