"""Tests for the family graph store, edits and queries."""

from family_tree import FamilyGraph
from models import Gender, Person, RelationshipLabel
from relationships import normalize


class TestStore:
    def test_add_person(self):
        graph = FamilyGraph()
        assert graph.add_person(Person("a", "Alice"))
        assert "a" in graph
        assert len(graph) == 1
        assert graph.get_person("a").name == "Alice"

    def test_duplicate_id_rejected_first_writer_wins(self):
        graph = FamilyGraph()
        assert graph.add_person(Person("a", "Alice"))
        assert not graph.add_person(Person("a", "Impostor"))
        assert graph.get_person("a").name == "Alice"

    def test_get_unknown_person(self):
        graph = FamilyGraph()
        assert graph.get_person("nope") is None
        assert graph.get_person(None) is None

    def test_edits_mark_graph_for_normalization(self, nuclear_family):
        assert not nuclear_family.needs_normalization
        nuclear_family.clear_father("C")
        assert nuclear_family.needs_normalization
        normalize(nuclear_family)
        assert not nuclear_family.needs_normalization


class TestEdits:
    def test_update_person_forces_id(self, nuclear_family):
        assert nuclear_family.update_person("C", Person("other", "Renamed", father_id="F"))
        updated = nuclear_family.get_person("C")
        assert updated.id == "C"
        assert updated.name == "Renamed"
        assert "other" not in nuclear_family

    def test_update_unknown_person(self, nuclear_family):
        assert not nuclear_family.update_person("X", Person("X", "Nobody"))

    def test_set_and_clear_parents(self, build):
        graph = build(Person("a", "A"), Person("b", "B"), Person("k", "Kid"))
        assert graph.set_father("k", "a")
        assert graph.set_mother("k", "b")
        normalize(graph)
        assert graph.get_children("a") == ["k"]
        assert graph.get_parents("k") == ["a", "b"]

        assert graph.clear_father("k")
        normalize(graph)
        assert graph.get_children("a") == []
        assert graph.get_parents("k") == ["b"]

    def test_set_parent_rejects_self_and_unknown(self, build):
        graph = build(Person("a", "A"))
        assert not graph.set_father("a", "a")
        assert not graph.set_mother("a", "missing")
        assert not graph.set_father("missing", "a")
        assert not graph.clear_mother("missing")

    def test_add_and_remove_spouse_is_mutual(self, build):
        graph = build(Person("a", "A"), Person("b", "B"))
        assert graph.add_spouse("a", "b")
        assert graph.get_spouses("a") == ["b"]
        assert graph.get_spouses("b") == ["a"]
        # Adding twice does not duplicate
        graph.add_spouse("b", "a")
        assert graph.get_spouses("a") == ["b"]

        assert graph.remove_spouse("a", "b")
        assert graph.get_spouses("a") == []
        assert graph.get_spouses("b") == []

    def test_add_spouse_rejects_self_and_unknown(self, build):
        graph = build(Person("a", "A"))
        assert not graph.add_spouse("a", "a")
        assert not graph.add_spouse("a", "missing")

    def test_set_birth_order(self, build):
        graph = build(Person("a", "A"))
        assert graph.set_birth_order("a", 2)
        assert graph.get_person("a").birth_order == 2
        assert not graph.set_birth_order("a", -1)
        assert graph.get_person("a").birth_order == 2
        assert graph.set_birth_order("a", None)
        assert not graph.set_birth_order("missing", 1)

    def test_remove_person_clears_all_references(self, build):
        graph = build(
            Person("F", "Father", Gender.MALE, spouse_ids=("M",)),
            Person("M", "Mother", Gender.FEMALE, spouse_ids=("F",)),
            Person("C", "Child", father_id="F", mother_id="M"),
            Person("GC", "Grandchild", father_id="C"),
        )
        assert graph.remove_person("M")

        for person in graph.persons().values():
            assert person.father_id != "M"
            assert person.mother_id != "M"
            assert "M" not in person.spouse_ids
        for kids in graph.children_index().values():
            assert "M" not in kids
        assert graph.get_person("C").mother_id is None
        assert graph.get_children("M") == []

        assert graph.remove_person("C")
        assert graph.get_children("F") == []
        assert graph.get_person("GC").father_id is None

    def test_remove_unknown_person(self, nuclear_family):
        assert not nuclear_family.remove_person("nobody")


class TestQueries:
    def test_parents_children_spouses(self, nuclear_family):
        assert nuclear_family.get_parents("C") == ["F", "M"]
        assert nuclear_family.get_children("F") == ["C"]
        assert nuclear_family.get_children("M") == ["C"]
        assert nuclear_family.get_spouses("F") == ["M"]
        assert nuclear_family.get_parents("missing") == []
        assert nuclear_family.get_spouses("missing") == []

    def test_siblings_include_half_siblings(self, build):
        graph = build(
            Person("F", "Father"),
            Person("M1", "First mother"),
            Person("M2", "Second mother"),
            Person("a", "A", father_id="F", mother_id="M1"),
            Person("b", "B", father_id="F", mother_id="M2"),
            Person("c", "C", mother_id="M2"),
        )
        assert graph.get_siblings("a") == ["b"]
        assert graph.get_siblings("b") == ["a", "c"]
        assert graph.get_siblings("F") == []

    def test_root_nodes(self, three_generations):
        assert three_generations.get_root_nodes() == ["R"]

    def test_dangling_parent_counts_as_root(self, build):
        graph = build(Person("a", "A", father_id="ghost"))
        assert graph.get_root_nodes() == ["a"]

    def test_find_relationship(self, build):
        graph = build(
            Person("F", "Father", Gender.MALE),
            Person("M", "Mother", Gender.FEMALE),
            Person("a", "A", father_id="F", mother_id="M"),
            Person("b", "B", father_id="F", mother_id="M"),
            Person("x", "Stranger"),
        )
        assert graph.find_relationship("a", "a") == RelationshipLabel.SAME_PERSON
        assert graph.find_relationship("F", "M") == RelationshipLabel.SPOUSE
        assert graph.find_relationship("a", "F") == RelationshipLabel.FATHER
        assert graph.find_relationship("a", "M") == RelationshipLabel.MOTHER
        assert graph.find_relationship("F", "a") == RelationshipLabel.CHILD
        assert graph.find_relationship("a", "b") == RelationshipLabel.SIBLING
        assert graph.find_relationship("a", "x") == RelationshipLabel.UNRELATED
        assert graph.find_relationship("a", "missing") is None

    def test_hierarchy(self, nuclear_family):
        tree = nuclear_family.hierarchy()
        assert tree["id"] == "F"
        assert tree["spouses"] == [{"id": "M", "name": "Mother", "gender": "F"}]
        assert [c["id"] for c in tree["children"]] == ["C"]
        assert tree["children"][0]["children"] == []

    def test_hierarchy_respects_max_generations(self, three_generations):
        tree = three_generations.hierarchy("R", max_generations=2)
        assert [c["id"] for c in tree["children"]] == ["C1", "C2"]
        assert all(c["children"] == [] for c in tree["children"])

    def test_hierarchy_without_roots(self, build):
        graph = build(Person("A", "A", father_id="B"), Person("B", "B", father_id="A"))
        assert graph.hierarchy() is None
        assert graph.hierarchy("missing") is None
        # A cycle is not expanded twice
        tree = graph.hierarchy("A", max_generations=10)
        assert tree["children"][0]["id"] == "B"
        assert tree["children"][0]["children"] == []
