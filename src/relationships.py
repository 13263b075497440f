"""Normalization of derived relationships from authoritative parent links."""

import logging

from family_tree import FamilyGraph
from models import Person

logger = logging.getLogger(__name__)


def derive_children(persons: dict[str, Person]) -> dict[str, list[str]]:
    """
    Build the children-by-parent index from father_id / mother_id.

    Children appear in the order their records are encountered, each at most
    once per parent. Parents that do not resolve to a person are ignored.
    """
    children: dict[str, list[str]] = {}
    for person_id, person in persons.items():
        for parent_id in (person.father_id, person.mother_id):
            if not parent_id or parent_id not in persons:
                continue
            kids = children.setdefault(parent_id, [])
            if person_id not in kids:
                kids.append(person_id)
    return children


def couple_key(a: str, b: str) -> tuple[str, str]:
    return tuple(sorted((a, b), key=str))


def infer_couples(persons: dict[str, Person]) -> list[tuple[str, str]]:
    """Distinct (father_id, mother_id) pairs of every child whose two parents both exist."""
    seen: set[tuple[str, str]] = set()
    couples: list[tuple[str, str]] = []
    for person in persons.values():
        father_id, mother_id = person.father_id, person.mother_id
        if not (father_id in persons and mother_id in persons) or father_id == mother_id:
            continue
        key = couple_key(father_id, mother_id)
        if key in seen:
            continue
        seen.add(key)
        couples.append((father_id, mother_id))
    return couples


def normalize(graph: FamilyGraph) -> FamilyGraph:
    """
    Recompute derived relationship state of `graph` in place.

    1. Discard and rebuild the children index from parent links.
    2. Make both parents of a shared child each other's spouse. This only ever
       adds spouse links, so a link removed by hand comes back as long as the
       couple still shares a child.

    Running it again on an unchanged graph yields identical state.

    Returns:
        The same graph, for chaining.
    """
    persons = graph.persons()
    logger.info("Building relationships for %d persons", len(persons))

    index = derive_children(persons)

    for father_id, mother_id in infer_couples(persons):
        father = graph.get_person(father_id)
        mother = graph.get_person(mother_id)
        if mother_id not in father.spouse_ids:
            graph.store(father.with_spouse(mother_id))
            logger.debug("Inferred spouse link: added %s to spouses of %s", mother_id, father_id)
        if father_id not in mother.spouse_ids:
            graph.store(mother.with_spouse(father_id))
            logger.debug("Inferred spouse link: added %s to spouses of %s", father_id, mother_id)

    graph.install_children_index(index)
    return graph
