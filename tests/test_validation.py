"""Tests for record and graph validation."""

import pytest

from models import Person
from validation import validate_graph, validate_person, validate_record


class TestValidateRecord:
    def test_valid_record(self):
        record = {
            "id": "a",
            "name": "A",
            "gender": "F",
            "birth_date": "1900",
            "death_date": "1980-05-02",
            "birth_order": 0,
        }
        assert validate_record(record) == {}

    def test_missing_name(self):
        assert list(validate_record({"id": "a"})) == ["name"]
        assert list(validate_record({"id": "a", "name": "  "})) == ["name"]

    @pytest.mark.parametrize("gender", ["X", "boy", 3])
    def test_invalid_gender(self, gender):
        assert list(validate_record({"name": "A", "gender": gender})) == ["gender"]

    @pytest.mark.parametrize("order", [-1, "first", 1.5, True])
    def test_invalid_birth_order(self, order):
        assert list(validate_record({"name": "A", "birth_order": order})) == ["birth_order"]

    def test_malformed_dates(self):
        errors = validate_record({"name": "A", "birth_date": "1900-02-30", "death_date": "soon"})
        assert set(errors) == {"birth_date", "death_date"}

    def test_birth_after_death(self):
        errors = validate_record({"name": "A", "birth_date": "1950", "death_date": "1949-12-31"})
        assert errors == {"death_date": ["Death date must not be before birth date"]}

    def test_several_problems_reported_together(self):
        errors = validate_record({"gender": "Q", "birth_order": -3})
        assert set(errors) == {"name", "gender", "birth_order"}

    def test_validate_person(self):
        assert validate_person(Person("a", "A", birth_date="1900-01-01")) == {}
        assert "birth_order" in validate_person(Person("a", "A", birth_order=-1))


class TestValidateGraph:
    def test_clean_graph(self, nuclear_family):
        assert validate_graph(nuclear_family) == []

    def test_parent_cycle_detected(self, build):
        graph = build(Person("A", "A", father_id="B"), Person("B", "B", father_id="A"))
        warnings = validate_graph(graph)
        assert len(warnings) == 1
        assert warnings[0].startswith("Cycle detected")

    def test_impossible_and_suspicious_ages(self, build):
        graph = build(
            Person("P", "Parent", birth_date="1950-01-01"),
            Person("old", "Older child", birth_date="1940-01-01", father_id="P"),
            Person("young", "Young parent's child", birth_date="1955-01-01", father_id="P"),
            Person("dead", "Ghost", birth_date="1900-01-01", death_date="1890-01-01"),
        )
        warnings = validate_graph(graph)
        assert "Impossible: Older child born before parent Parent" in warnings
        assert "Suspicious: Parent was less than 12 years old when Young parent's child was born" in warnings
        assert "Impossible: Ghost died before being born" in warnings
