"""Validation of person records and family graph consistency."""

from datetime import date
import re

import networkx as nx

from family_tree import FamilyGraph
from graph import build_parent_graph
from models import Person

GENDER_CODES = {"M", "F", "U", "MALE", "FEMALE", "UNKNOWN"}

_YEAR_RE = re.compile(r"^\d{4}$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def _as_date(value) -> date | None:
    """Parse YYYY or YYYY-MM-DD into a date; None if it is neither."""
    s = str(value).strip()
    if _YEAR_RE.match(s):
        return date(int(s), 1, 1)
    match = _ISO_RE.match(s)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def _add(errors: dict[str, list[str]], field_name: str, message: str):
    errors.setdefault(field_name, []).append(message)


def validate_record(record: dict) -> dict[str, list[str]]:
    """
    Validate a raw person record as found in a family document.

    Returns a map of field name -> error messages; an empty map means valid.
    Nothing is raised.
    """
    errors: dict[str, list[str]] = {}

    name = record.get("name")
    if not name or not str(name).strip():
        _add(errors, "name", "Name is required")

    gender = record.get("gender")
    if gender and (not isinstance(gender, str) or gender.strip().upper() not in GENDER_CODES):
        _add(errors, "gender", "Gender must be one of M, F, U")

    birth_order = record.get("birth_order")
    if birth_order is not None:
        if isinstance(birth_order, bool) or not isinstance(birth_order, int):
            _add(errors, "birth_order", "Birth order must be an integer of 0 or more")
        elif birth_order < 0:
            _add(errors, "birth_order", "Birth order must be an integer of 0 or more")

    dates: dict[str, date] = {}
    for field_name in ("birth_date", "death_date"):
        value = record.get(field_name)
        if value is None or value == "":
            continue
        parsed = _as_date(value)
        if parsed is None:
            _add(errors, field_name, f"{field_name} must be in YYYY-MM-DD format")
        else:
            dates[field_name] = parsed

    if "birth_date" in dates and "death_date" in dates and dates["birth_date"] > dates["death_date"]:
        _add(errors, "death_date", "Death date must not be before birth date")

    return errors


def validate_person(person: Person) -> dict[str, list[str]]:
    """Validate a Person the same way as a raw record."""
    return validate_record(person.to_dict())


def validate_graph(graph: FamilyGraph) -> list[str]:
    """
    Validate the family graph for:
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent)
    - Date ordering issues

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    persons = graph.persons()

    parent_graph = build_parent_graph(graph)

    # Check for cycles
    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # ISO dates (YYYY-MM-DD) can be compared as strings
    for parent_id, child_id in parent_graph.edges():
        parent = persons[parent_id]
        child = persons[child_id]
        if not (parent.birth_date and child.birth_date):
            continue

        if child.birth_date < parent.birth_date:
            warnings.append(f"Impossible: {child.name} born before parent {parent.name}")
        elif int(child.birth_date[:4]) - int(parent.birth_date[:4]) < 12:
            warnings.append(
                f"Suspicious: {parent.name} was less than 12 years old when {child.name} was born"
            )

    # Check death before birth
    for person in persons.values():
        if person.birth_date and person.death_date and person.death_date < person.birth_date:
            warnings.append(f"Impossible: {person.name} died before being born")

    return warnings
