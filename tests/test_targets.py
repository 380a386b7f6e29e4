"""Tests for target selection."""

import pytest

from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.model import (
    ClassTarget,
    NodeTarget,
    ObjectsOfTarget,
    Shape,
    ShapeKind,
    SubjectsOfTarget,
)
from rdf_shapecheck.shacl.targets import has_type, select_targets, sorted_targets
from rdf_shapecheck.vocabulary import RDF_TYPE, RDFS_SUBCLASS_OF

from builders import ex, lit


@pytest.fixture
def graph():
    return TripleGraph([
        (ex("alice"), RDF_TYPE, ex("Person")),
        (ex("bob"), RDF_TYPE, ex("Student")),
        (ex("Student"), RDFS_SUBCLASS_OF, ex("Person")),
        (ex("alice"), ex("knows"), ex("bob")),
        (ex("alice"), ex("age"), lit(30)),
    ])


def shape(*targets, deactivated=False):
    return Shape(id=ex("S"), kind=ShapeKind.NODE, targets=targets, deactivated=deactivated)


class TestSelectTargets:
    """Tests for each target kind."""

    def test_class_target_exact_match(self, graph):
        """Test class targets do not follow rdfs:subClassOf by default."""
        assert select_targets(shape(ClassTarget(ex("Person"))), graph) == {ex("alice")}

    def test_class_target_with_subclass_inference(self, graph):
        focus = select_targets(shape(ClassTarget(ex("Person"))), graph, subclass_inference=True)
        assert focus == {ex("alice"), ex("bob")}

    def test_node_target_need_not_exist(self, graph):
        assert select_targets(shape(NodeTarget(ex("carol"))), graph) == {ex("carol")}

    def test_subjects_of(self, graph):
        assert select_targets(shape(SubjectsOfTarget(ex("knows"))), graph) == {ex("alice")}

    def test_objects_of_includes_literals(self, graph):
        assert select_targets(shape(ObjectsOfTarget(ex("age"))), graph) == {lit(30)}

    def test_union_of_targets(self, graph):
        focus = select_targets(
            shape(ClassTarget(ex("Person")), ObjectsOfTarget(ex("knows")), NodeTarget(ex("alice"))),
            graph,
        )
        assert focus == {ex("alice"), ex("bob")}

    def test_no_targets(self, graph):
        assert select_targets(shape(), graph) == set()

    def test_deactivated_shape_has_no_targets(self, graph):
        assert select_targets(shape(ClassTarget(ex("Person")), deactivated=True), graph) == set()

    def test_sorted_targets_deterministic(self, graph):
        s = shape(NodeTarget(ex("zed")), NodeTarget(ex("amy")))
        assert sorted_targets(s, graph) == [ex("amy"), ex("zed")]


class TestHasType:
    """Tests for the rdf:type check shared with sh:class."""

    def test_direct(self, graph):
        assert has_type(graph, ex("alice"), ex("Person"))

    def test_subclass_requires_opt_in(self, graph):
        assert not has_type(graph, ex("bob"), ex("Person"))
        assert has_type(graph, ex("bob"), ex("Person"), subclass_inference=True)

    def test_untyped(self, graph):
        assert not has_type(graph, ex("carol"), ex("Person"), subclass_inference=True)
