"""
Target selection: which data-graph nodes a shape applies to.
"""

from __future__ import annotations

from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.model import (
    ClassTarget,
    NodeTarget,
    ObjectsOfTarget,
    Shape,
    SubjectsOfTarget,
    Target,
)
from rdf_shapecheck.terms import Term
from rdf_shapecheck.vocabulary import RDF_TYPE


def select_target(target: Target, graph: TripleGraph, subclass_inference: bool = False) -> set[Term]:
    """Focus nodes for a single target declaration."""
    if isinstance(target, ClassTarget):
        if not subclass_inference:
            return set(graph.instances_of(target.cls))
        nodes: set[Term] = set()
        for cls in graph.subclasses(target.cls):
            nodes.update(graph.instances_of(cls))
        return nodes
    if isinstance(target, NodeTarget):
        # Explicit targets are focus nodes whether or not the data mentions them
        return {target.node}
    if isinstance(target, SubjectsOfTarget):
        return set(graph.subjects_with_predicate(target.predicate))
    if isinstance(target, ObjectsOfTarget):
        return set(graph.objects_with_predicate(target.predicate))
    raise TypeError(f"Unknown target type: {type(target).__name__}")


def select_targets(shape: Shape, graph: TripleGraph, subclass_inference: bool = False) -> set[Term]:
    """
    Union of the focus nodes of every target on the shape.

    Class targets match rdf:type exactly unless subclass_inference is set,
    in which case instances of transitive rdfs:subClassOf descendants count
    too. Deactivated shapes have no focus nodes.
    """
    if shape.deactivated:
        return set()
    focus_nodes: set[Term] = set()
    for target in shape.targets:
        focus_nodes |= select_target(target, graph, subclass_inference)
    return focus_nodes


def sorted_targets(shape: Shape, graph: TripleGraph, subclass_inference: bool = False) -> list[Term]:
    """select_targets() in deterministic term order."""
    return sorted(select_targets(shape, graph, subclass_inference), key=Term.sort_key)


def has_type(graph: TripleGraph, node: Term, cls: Term, subclass_inference: bool = False) -> bool:
    """Whether node has an rdf:type naming cls (or, optionally, a subclass of it)."""
    types = graph.objects(node, RDF_TYPE)
    if cls in types:
        return True
    if not subclass_inference or not types:
        return False
    return not graph.subclasses(cls).isdisjoint(types)
