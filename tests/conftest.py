"""Pytest fixtures for family graph tests."""

import pytest

from family_tree import FamilyGraph
from models import Gender, Person
from relationships import normalize


@pytest.fixture
def build():
    """Factory: build and normalize a FamilyGraph from Person records."""

    def _build(*persons: Person) -> FamilyGraph:
        graph = FamilyGraph(title="Test family")
        for person in persons:
            graph.add_person(person)
        return normalize(graph)

    return _build


@pytest.fixture
def nuclear_family(build):
    """Father F, mother M and their child C."""
    return build(
        Person("F", "Father", Gender.MALE),
        Person("M", "Mother", Gender.FEMALE),
        Person("C", "Child", father_id="F", mother_id="M"),
    )


@pytest.fixture
def three_generations(build):
    """Root R with children C1, C2 and grandchild G (child of C1)."""
    return build(
        Person("R", "Root", Gender.MALE),
        Person("C1", "Child one", father_id="R"),
        Person("C2", "Child two", father_id="R"),
        Person("G", "Grandchild", father_id="C1"),
    )


@pytest.fixture
def sample_document():
    return {
        "title": "Sample family",
        "description": "Three generations",
        "persons": {
            "p1": {"id": "p1", "name": "Taro", "gender": "M", "birth_date": "1930"},
            "p2": {"id": "p2", "name": "Hanako", "gender": "F", "birth_date": "1932-04-01"},
            "p3": {
                "id": "p3",
                "name": "Ichiro",
                "gender": "male",
                "birth_date": "1955-06-15",
                "father_id": "p1",
                "mother_id": "p2",
                "birth_order": 0,
            },
            "p4": {
                "id": "p4",
                "name": "Jiro",
                "gender": "M",
                "birth_date": "1958-01-20",
                "father_id": "p1",
                "mother_id": "p2",
                "birth_order": 1,
                "children_ids": ["stale"],
            },
            "p5": {
                "id": "p5",
                "name": "Saburo",
                "gender": "M",
                "father_id": "p3",
                "spouse_ids": ["ghost"],
                "note": "Spouse record missing",
            },
        },
    }
