"""Tests for generation level assignment."""

import generations
from generations import assign_generation_levels, assign_levels
from models import Person


def test_three_generations(three_generations):
    assert assign_levels(three_generations) == {"R": 0, "C1": 1, "C2": 1, "G": 2}


def test_spouses_share_a_level(nuclear_family):
    assert assign_levels(nuclear_family) == {"F": 0, "M": 0, "C": 1}


def test_parent_cycle_terminates_and_defaults_to_zero(build):
    graph = build(Person("A", "A", father_id="B"), Person("B", "B", father_id="A"))
    result = assign_generation_levels(graph)
    assert result.levels == {"A": 0, "B": 0}
    assert result.unreachable == ["A", "B"]


def test_cycle_reachable_from_root_terminates(build):
    # A's mother B is also A's child; B is first reached as R's inferred spouse
    graph = build(
        Person("R", "Root"),
        Person("A", "A", father_id="R", mother_id="B"),
        Person("B", "B", father_id="A"),
    )
    result = assign_generation_levels(graph)
    assert result.levels == {"R": 0, "A": 1, "B": 0}
    assert [(c.person_id, c.kept_level, c.proposed_level, c.kind) for c in result.conflicts] == [
        ("B", 0, 2, "child")
    ]


def test_empty_graph(build):
    result = assign_generation_levels(build())
    assert result.levels == {}
    assert result.conflicts == []


def test_levels_consistent_unless_conflict_recorded(build):
    graph = build(
        Person("R", "Root"),
        Person("Q", "Other root"),
        Person("P", "Parent", father_id="Q"),
        Person("K", "Kid", father_id="R", mother_id="P"),
        Person("S", "Spouse", spouse_ids=("P",)),
        Person("G", "Grandkid", father_id="K"),
    )
    result = assign_generation_levels(graph)
    conflicted = {c.person_id for c in result.conflicts}
    for child_id, child in graph.persons().items():
        for parent_id in child.parent_ids():
            if parent_id in graph and child_id not in conflicted and parent_id not in conflicted:
                assert result.levels[child_id] == result.levels[parent_id] + 1


def test_lowered_spouse_requeues_descendants(build):
    graph = build(
        Person("R", "Root"),
        Person("P", "Parent", father_id="R", spouse_ids=("Q",)),
        Person("Q", "Married-in root", spouse_ids=("P",)),
        Person("K", "Kid", father_id="P"),
    )
    result = assign_generation_levels(graph)
    assert result.levels == {"R": 0, "P": 0, "Q": 0, "K": 1}
    assert [(c.person_id, c.kind) for c in result.conflicts] == [("P", "spouse")]


def test_legacy_mode_keeps_stale_descendant_level(build):
    graph = build(
        Person("R", "Root"),
        Person("P", "Parent", father_id="R", spouse_ids=("Q",)),
        Person("Q", "Married-in root", spouse_ids=("P",)),
        Person("K", "Kid", father_id="P"),
    )
    result = assign_generation_levels(graph, requeue_lowered=False)
    assert result.levels == {"R": 0, "P": 0, "Q": 0, "K": 2}
    assert ("K", "child") in [(c.person_id, c.kind) for c in result.conflicts]


def test_dangling_children_and_spouses_ignored(build):
    graph = build(Person("a", "A", spouse_ids=("ghost",)), Person("b", "B", father_id="ghost"))
    assert assign_levels(graph) == {"a": 0, "b": 0}


def test_visit_cap_stops_repropagation(build, monkeypatch):
    graph = build(
        Person("R", "Root"),
        Person("P", "Parent", father_id="R", spouse_ids=("Q",)),
        Person("Q", "Married-in root", spouse_ids=("P",)),
        Person("K", "Kid", father_id="P"),
    )
    # Four persons: each may be dequeued once
    monkeypatch.setattr(generations, "VISIT_CAP_FACTOR", 0.25)

    legacy = assign_generation_levels(graph, requeue_lowered=False)
    assert legacy.capped == ["P"]
    assert legacy.levels == {"R": 0, "P": 0, "Q": 0, "K": 2}

    # Stale queue entries are skipped without counting as a visit
    symmetric = assign_generation_levels(graph)
    assert symmetric.capped == []
    assert symmetric.levels == {"R": 0, "P": 0, "Q": 0, "K": 1}
