"""Tests for building graphs from rdflib (optional dependency)."""

import pytest

rdflib = pytest.importorskip("rdflib")

from rdf_shapecheck.config import ValidationOptions
from rdf_shapecheck.graph import TripleGraph, term_from_rdflib
from rdf_shapecheck.shacl.engine import validate
from rdf_shapecheck.shacl.model import ConstraintComponent
from rdf_shapecheck.terms import RDF_LANGSTRING, Term, XSD_STRING

SHAPES_TTL = """
@prefix sh: <http://www.w3.org/ns/shacl#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix ex: <http://example.org/> .

ex:PersonShape a sh:NodeShape ;
    sh:targetClass ex:Person ;
    sh:property [
        sh:path ex:name ;
        sh:minCount 1 ;
        sh:maxCount 1 ;
        sh:datatype xsd:string ;
    ] ;
    sh:property [
        sh:path ex:status ;
        sh:in ( "active" "retired" ) ;
    ] ;
    sh:property [
        sh:path ex:age ;
        sh:maxInclusive 150 ;
        sh:severity sh:Warning ;
    ] .
"""

DATA_TTL = """
@prefix ex: <http://example.org/> .

ex:alice a ex:Person ; ex:name "Alice" ; ex:status "active" ; ex:age 30 .
ex:bob a ex:Person ; ex:status "unknown" ; ex:age 200 .
"""


def parse_ttl(text):
    graph = rdflib.Graph()
    graph.parse(data=text, format="turtle")
    return TripleGraph.from_rdflib(graph)


class TestTermConversion:
    """Tests for rdflib node conversion."""

    def test_uri(self):
        assert term_from_rdflib(rdflib.URIRef("http://example.org/a")) == Term.iri("http://example.org/a")

    def test_bnode(self):
        assert term_from_rdflib(rdflib.BNode("x1")) == Term.bnode("x1")

    def test_plain_literal(self):
        assert term_from_rdflib(rdflib.Literal("hi")).datatype == XSD_STRING

    def test_language_literal(self):
        term = term_from_rdflib(rdflib.Literal("hallo", lang="de"))
        assert term.lang == "de"
        assert term.datatype == RDF_LANGSTRING

    def test_typed_literal(self):
        term = term_from_rdflib(rdflib.Literal(5))
        assert term.to_python() == 5

    def test_unsupported_node(self):
        with pytest.raises(TypeError):
            term_from_rdflib("not a node")


class TestEndToEnd:
    """Validate Turtle documents parsed by rdflib."""

    def test_validate_turtle(self):
        report = validate(parse_ttl(DATA_TTL), parse_ttl(SHAPES_TTL), ValidationOptions(parallelism=2))

        assert report.conforms is False
        bob = Term.iri("http://example.org/bob")
        assert set(report.group_by_focus_node()) == {bob}
        components = {r.component for r in report.results}
        assert components == {
            ConstraintComponent.MIN_COUNT,
            ConstraintComponent.IN,
            ConstraintComponent.MAX_INCLUSIVE,
        }
        assert len(report.warnings()) == 1

    def test_report_turtle_parses(self):
        report = validate(parse_ttl(DATA_TTL), parse_ttl(SHAPES_TTL), ValidationOptions(parallelism=1))
        graph = rdflib.Graph()
        graph.parse(data=report.to_turtle(), format="turtle")
        sh = rdflib.Namespace("http://www.w3.org/ns/shacl#")
        assert len(list(graph.subjects(rdflib.RDF.type, sh.ValidationResult))) == 3
