"""In-memory family graph store: person facts, edit operations and relationship queries."""

from dataclasses import replace
import logging

from models import Person, RelationshipLabel

logger = logging.getLogger(__name__)


class FamilyGraph:
    """
    Mapping of person id -> Person facts plus a derived children index.

    Person records are immutable; edits replace the stored record. The children
    index is only ever rebuilt as a whole by `relationships.normalize`, so after
    any edit `needs_normalization` is True until the next normalization pass.
    """

    def __init__(self, title: str = "", description: str = ""):
        self.title = title
        self.description = description
        self._persons: dict[str, Person] = {}
        self._children: dict[str, list[str]] = {}
        self.needs_normalization = False

    def __len__(self) -> int:
        return len(self._persons)

    def __contains__(self, person_id) -> bool:
        return person_id in self._persons

    # ========================================================================
    # Store
    # ========================================================================

    def add_person(self, person: Person) -> bool:
        """Add a person. Returns False if the id is already taken (the existing record wins)."""
        if person.id in self._persons:
            logger.warning("Person with ID %s already exists, not adding %s", person.id, person.name)
            return False
        self._persons[person.id] = person
        self.needs_normalization = True
        logger.debug("Added person %s (%s)", person.name, person.id)
        return True

    def get_person(self, person_id: str | None) -> Person | None:
        if person_id is None:
            return None
        return self._persons.get(person_id)

    def persons(self) -> dict[str, Person]:
        """Return a shallow copy of the id -> Person mapping, in insertion order."""
        return dict(self._persons)

    def store(self, person: Person):
        """Overwrite the record for an existing id. Used by normalization and edit operations."""
        self._persons[person.id] = person

    def install_children_index(self, index: dict[str, list[str]]):
        """Replace the derived children index wholesale."""
        self._children = {pid: list(kids) for pid, kids in index.items()}
        self.needs_normalization = False

    def children_index(self) -> dict[str, list[str]]:
        return {pid: list(kids) for pid, kids in self._children.items()}

    # ========================================================================
    # Edit operations
    # ========================================================================

    def update_person(self, person_id: str, person: Person) -> bool:
        if person_id not in self._persons:
            logger.error("Cannot update non-existent person: %s", person_id)
            return False
        if person.id != person_id:
            logger.warning(
                "Updating %s with a record carrying ID %s; forcing ID to %s",
                person_id,
                person.id,
                person_id,
            )
            person = replace(person, id=person_id)
        self._persons[person_id] = person
        self.needs_normalization = True
        return True

    def remove_person(self, person_id: str) -> bool:
        """Remove a person and clear every reference other persons hold to them."""
        removed = self._persons.pop(person_id, None)
        if removed is None:
            logger.warning("Attempted to remove non-existent person: %s", person_id)
            return False

        for pid, person in list(self._persons.items()):
            updated = person
            if updated.father_id == person_id:
                updated = replace(updated, father_id=None)
            if updated.mother_id == person_id:
                updated = replace(updated, mother_id=None)
            updated = updated.without_spouse(person_id)
            if updated is not person:
                self._persons[pid] = updated
                logger.debug("Cleared references to %s from %s", person_id, pid)

        self._children.pop(person_id, None)
        for kids in self._children.values():
            if person_id in kids:
                kids.remove(person_id)

        self.needs_normalization = True
        logger.info("Removed person %s (%s)", removed.name, person_id)
        return True

    def set_father(self, child_id: str, parent_id: str) -> bool:
        return self._set_parent(child_id, parent_id, "father_id")

    def set_mother(self, child_id: str, parent_id: str) -> bool:
        return self._set_parent(child_id, parent_id, "mother_id")

    def clear_father(self, child_id: str) -> bool:
        return self._clear_parent(child_id, "father_id")

    def clear_mother(self, child_id: str) -> bool:
        return self._clear_parent(child_id, "mother_id")

    def _set_parent(self, child_id: str, parent_id: str, attr: str) -> bool:
        child = self.get_person(child_id)
        if child is None or parent_id not in self._persons:
            logger.error("Parent or child does not exist: %s -> %s", parent_id, child_id)
            return False
        if child_id == parent_id:
            logger.error("A person cannot be their own parent: %s", child_id)
            return False
        self._persons[child_id] = replace(child, **{attr: parent_id})
        self.needs_normalization = True
        return True

    def _clear_parent(self, child_id: str, attr: str) -> bool:
        child = self.get_person(child_id)
        if child is None:
            logger.error("Child does not exist: %s", child_id)
            return False
        self._persons[child_id] = replace(child, **{attr: None})
        self.needs_normalization = True
        return True

    def add_spouse(self, person1_id: str, person2_id: str) -> bool:
        """Link two existing persons as spouses in both directions."""
        p1 = self.get_person(person1_id)
        p2 = self.get_person(person2_id)
        if p1 is None or p2 is None:
            logger.error("Cannot link spouses, missing person: %s / %s", person1_id, person2_id)
            return False
        if person1_id == person2_id:
            logger.error("A person cannot be their own spouse: %s", person1_id)
            return False
        self._persons[person1_id] = p1.with_spouse(person2_id)
        self._persons[person2_id] = p2.with_spouse(person1_id)
        self.needs_normalization = True
        return True

    def remove_spouse(self, person1_id: str, person2_id: str) -> bool:
        """
        Unlink two spouses in both directions.

        Note that a couple sharing a child is linked again by the next normalization.
        """
        p1 = self.get_person(person1_id)
        p2 = self.get_person(person2_id)
        if p1 is None or p2 is None:
            logger.error("Cannot unlink spouses, missing person: %s / %s", person1_id, person2_id)
            return False
        self._persons[person1_id] = p1.without_spouse(person2_id)
        self._persons[person2_id] = p2.without_spouse(person1_id)
        self.needs_normalization = True
        return True

    def set_birth_order(self, person_id: str, order: int | None) -> bool:
        person = self.get_person(person_id)
        if person is None or (order is not None and order < 0):
            return False
        self._persons[person_id] = replace(person, birth_order=order)
        return True

    # ========================================================================
    # Queries
    # ========================================================================

    def get_parents(self, person_id: str) -> list[str]:
        person = self.get_person(person_id)
        return person.parent_ids() if person else []

    def get_children(self, person_id: str) -> list[str]:
        return list(self._children.get(person_id, []))

    def get_spouses(self, person_id: str) -> list[str]:
        person = self.get_person(person_id)
        return list(person.spouse_ids) if person else []

    def get_siblings(self, person_id: str) -> list[str]:
        """Persons sharing a father or a mother with `person_id` (half-siblings included)."""
        person = self.get_person(person_id)
        if person is None or not (person.father_id or person.mother_id):
            return []
        return [
            pid
            for pid, other in self._persons.items()
            if pid != person_id
            and (
                (person.father_id and person.father_id == other.father_id)
                or (person.mother_id and person.mother_id == other.mother_id)
            )
        ]

    def get_root_nodes(self) -> list[str]:
        """Persons whose father and mother both fail to resolve to a stored person."""
        return [
            pid
            for pid, person in self._persons.items()
            if person.father_id not in self._persons and person.mother_id not in self._persons
        ]

    def find_relationship(self, person1_id: str, person2_id: str) -> RelationshipLabel | None:
        """Direct relationship of person2 to person1, or None if either is unknown."""
        if person1_id == person2_id:
            return RelationshipLabel.SAME_PERSON

        p1 = self.get_person(person1_id)
        p2 = self.get_person(person2_id)
        if p1 is None or p2 is None:
            return None

        if person2_id in p1.spouse_ids:
            return RelationshipLabel.SPOUSE
        if p1.father_id == person2_id:
            return RelationshipLabel.FATHER
        if p1.mother_id == person2_id:
            return RelationshipLabel.MOTHER
        if person1_id in (p2.father_id, p2.mother_id):
            return RelationshipLabel.CHILD
        if person2_id in self.get_siblings(person1_id):
            return RelationshipLabel.SIBLING
        return RelationshipLabel.UNRELATED

    def hierarchy(self, root_id: str | None = None, max_generations: int = 3) -> dict | None:
        """
        Nested descendant view rooted at `root_id` (default: the first root node).

        Each node carries id, name, gender, dates, its spouses and its children,
        down to `max_generations` levels. A person already on the current path
        is not expanded again.

        Returns:
            The nested dict, or None if there is no usable root.
        """
        if root_id is None:
            roots = self.get_root_nodes()
            if not roots:
                logger.warning("Family graph has no root nodes")
                return None
            root_id = roots[0]

        if root_id not in self._persons:
            logger.warning("Person %s not found", root_id)
            return None

        def build(person_id: str, generation: int, path: frozenset) -> dict | None:
            if generation >= max_generations or person_id in path:
                return None
            person = self.get_person(person_id)
            if person is None:
                return None
            path = path | {person_id}

            node = {
                "id": person.id,
                "name": person.name,
                "gender": person.gender.value,
                "birth_date": person.birth_date,
                "death_date": person.death_date,
                "spouses": [],
                "children": [],
            }
            for spouse_id in person.spouse_ids:
                spouse = self.get_person(spouse_id)
                if spouse:
                    node["spouses"].append(
                        {"id": spouse.id, "name": spouse.name, "gender": spouse.gender.value}
                    )
            for child_id in self.get_children(person_id):
                child_node = build(child_id, generation + 1, path)
                if child_node:
                    node["children"].append(child_node)
            return node

        return build(root_id, 0, frozenset())
