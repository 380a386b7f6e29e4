"""Tests for the validation engine."""

import logging
import time
from datetime import timedelta

import pytest

from rdf_shapecheck.config import ValidationOptions
from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl import engine as engine_module
from rdf_shapecheck.shacl.engine import ValidationEngine, validate
from rdf_shapecheck.shacl.errors import EngineError, ShapesParseError
from rdf_shapecheck.shacl.model import ConstraintComponent, Severity
from rdf_shapecheck.shacl.reader import read_shapes
from rdf_shapecheck.shacl.report import ValidationState
from rdf_shapecheck.terms import Term
from rdf_shapecheck.vocabulary import RDF_TYPE, RDFS_SUBCLASS_OF, SH, SH_PROPERTY, SH_WARNING

from builders import ShapesBuilder, ex, lit, xsd


def person_shapes(**name_constraints):
    """PersonShape targeting ex:Person with one property on ex:name."""
    b = ShapesBuilder()
    shape = b.node_shape("PersonShape", target_class=ex("Person"))
    b.property(shape, ex("name"), **name_constraints)
    return b.graph()


def people(count, named=True):
    triples = []
    for i in range(count):
        person = ex(f"p{i:03d}")
        triples.append((person, RDF_TYPE, ex("Person")))
        if named:
            triples.append((person, ex("name"), lit(f"Person {i}")))
    return TripleGraph(triples)


SEQUENTIAL = ValidationOptions(parallelism=1)
PARALLEL = ValidationOptions(parallelism=4)


# ============================================================================
# Core behaviour
# ============================================================================

class TestValidate:
    """Tests for end-to-end validation."""

    @pytest.mark.parametrize("options", [SEQUENTIAL, PARALLEL])
    def test_no_intersecting_targets_conforms(self, options):
        """Test shapes whose targets match nothing yield an empty conforming report."""
        data = TripleGraph([(ex("rex"), RDF_TYPE, ex("Dog"))])
        report = validate(data, person_shapes(min_count=1), options)
        assert report.conforms is True
        assert report.results == ()

    @pytest.mark.parametrize("options", [SEQUENTIAL, PARALLEL])
    def test_shared_property_shape_runs_once_per_focus_node(self, options):
        """Test a property shape reached from two node shapes is not reported twice."""
        b = ShapesBuilder()
        person = b.node_shape("PersonShape", target_class=ex("Person"))
        named = b.node_shape("NamedShape", target_class=ex("Person"))
        prop = b.property(person, ex("name"), min_count=1)
        b.add(named, SH_PROPERTY, prop)

        report = validate(people(1, named=False), b.graph(), options)
        assert len(report.results) == 1
        assert report.results[0].shape_id == prop
        assert report.stats.units_total == 1

    @pytest.mark.parametrize("options", [SEQUENTIAL, PARALLEL])
    @pytest.mark.parametrize("names,violations", [(0, 1), (1, 0), (2, 1)])
    def test_exactly_one_name(self, options, names, violations):
        """Test minCount = maxCount = 1 reports one violation with the actual count."""
        triples = [(ex("alice"), RDF_TYPE, ex("Person"))]
        triples += [(ex("alice"), ex("name"), lit(f"n{i}")) for i in range(names)]
        report = validate(TripleGraph(triples), person_shapes(min_count=1, max_count=1), options)

        assert len(report.results) == violations
        assert report.conforms is (violations == 0)
        if violations:
            assert report.results[0].details["actual"] == names
            assert report.results[0].focus_node == ex("alice")
            assert report.results[0].shape_id != ex("PersonShape")

    def test_idempotent(self):
        """Test two runs over the same inputs give equal sorted results."""
        shapes = person_shapes(min_count=1, datatype=xsd("integer"))
        data = people(30)
        first = validate(data, shapes, PARALLEL)
        second = validate(data, shapes, PARALLEL)
        assert first.sorted() == second.sorted()
        assert first == second

    def test_parallel_matches_sequential(self):
        shapes = person_shapes(min_count=1, max_length=7)
        data = people(50)
        assert validate(data, shapes, SEQUENTIAL) == validate(data, shapes, PARALLEL)

    def test_results_sorted(self):
        report = validate(people(10, named=False), person_shapes(min_count=1), PARALLEL)
        focus = [r.focus_node for r in report.results]
        assert focus == sorted(focus, key=lambda t: t.sort_key())

    def test_node_level_constraints(self):
        """Test constraints on the node shape itself apply to each focus node."""
        b = ShapesBuilder()
        b.node_shape("S", target_objects_of=ex("homepage"), node_kind=Term.iri(f"{SH}IRI"))
        data = TripleGraph([
            (ex("a"), ex("homepage"), ex("site")),
            (ex("b"), ex("homepage"), lit("not an IRI")),
        ])
        report = validate(data, b.graph(), SEQUENTIAL)
        assert [r.focus_node for r in report.results] == [lit("not an IRI")]
        assert report.results[0].path is None

    def test_warning_severity_conforms(self):
        b = ShapesBuilder()
        shape = b.node_shape("S", target_class=ex("Person"))
        b.property(shape, ex("email"), min_count=1, severity=SH_WARNING)
        report = validate(people(2), b.graph(), SEQUENTIAL)
        assert report.conforms is True
        assert len(report.warnings()) == 2

    def test_deactivated_shape_ignored(self):
        b = ShapesBuilder()
        shape = b.node_shape("S", target_class=ex("Person"), deactivated=True)
        b.property(shape, ex("email"), min_count=1)
        report = validate(people(2), b.graph(), SEQUENTIAL)
        assert report.conforms
        assert report.stats.units_total == 0

    def test_deactivated_property_ignored(self):
        b = ShapesBuilder()
        shape = b.node_shape("S", target_class=ex("Person"))
        b.property(shape, ex("email"), min_count=1, deactivated=True)
        b.property(shape, ex("name"), min_count=1)
        report = validate(people(2), b.graph(), SEQUENTIAL)
        assert report.conforms
        assert report.stats.units_total == 2

    def test_subclass_inference_option(self):
        b = ShapesBuilder()
        shape = b.node_shape("S", target_class=ex("Agent"))
        b.property(shape, ex("name"), min_count=1)
        data = TripleGraph([
            (ex("alice"), RDF_TYPE, ex("Person")),
            (ex("Person"), RDFS_SUBCLASS_OF, ex("Agent")),
        ])
        assert validate(data, b.graph(), SEQUENTIAL).conforms
        inferred = validate(data, b.graph(), ValidationOptions(parallelism=1, subclass_inference=True))
        assert len(inferred.results) == 1


# ============================================================================
# Scenarios
# ============================================================================

class TestScenarios:
    """End-to-end scenarios over realistic shapes."""

    def test_numeric_bound(self):
        """Test 300 violates maxInclusive 255 while 100 conforms."""
        b = ShapesBuilder()
        shape = b.node_shape("ByteShape", target_subjects_of=ex("value"))
        b.property(shape, ex("value"), datatype=xsd("integer"), max_inclusive=255)
        data = TripleGraph([
            (ex("big"), ex("value"), lit(300)),
            (ex("small"), ex("value"), lit(100)),
        ])
        report = validate(data, b.graph(), SEQUENTIAL)
        assert len(report.results) == 1
        result = report.results[0]
        assert result.focus_node == ex("big")
        assert result.component == ConstraintComponent.MAX_INCLUSIVE
        assert (result.details["actual"], result.details["expected"]) == (300, 255)

    def test_pattern(self):
        """Test "myVar" violates the identifier pattern and "MyVar" conforms."""
        b = ShapesBuilder()
        shape = b.node_shape("ModuleShape", target_subjects_of=ex("moduleName"))
        b.property(shape, ex("moduleName"), pattern="^[A-Z][a-zA-Z0-9_]*$")
        data = TripleGraph([
            (ex("m1"), ex("moduleName"), lit("myVar")),
            (ex("m2"), ex("moduleName"), lit("MyVar")),
        ])
        report = validate(data, b.graph(), SEQUENTIAL)
        assert [r.focus_node for r in report.results] == [ex("m1")]

    @pytest.mark.parametrize("minimum,conforms", [(2, True), (3, False)])
    def test_qualified_counting(self, minimum, conforms):
        """Test 2 of 3 values conform to the nested shape."""
        b = ShapesBuilder()
        shape = b.node_shape("GenServerShape", target_class=ex("Module"))
        nested = b.bnode("callback")
        b.params(nested, cls=ex("Callback"))
        b.property(
            shape, ex("hasFunction"),
            qualified_value_shape=nested, qualified_min_count=minimum,
        )
        data = TripleGraph([
            (ex("mod"), RDF_TYPE, ex("Module")),
            (ex("mod"), ex("hasFunction"), ex("init")),
            (ex("mod"), ex("hasFunction"), ex("handle_call")),
            (ex("mod"), ex("hasFunction"), ex("helper")),
            (ex("init"), RDF_TYPE, ex("Callback")),
            (ex("handle_call"), RDF_TYPE, ex("Callback")),
        ])
        report = validate(data, b.graph(), SEQUENTIAL)
        assert report.conforms is conforms
        if not conforms:
            details = report.results[0].details
            assert details["actual"] == 2
            assert details["expected"] == 3

    def test_regex_dos_does_not_block(self, caplog):
        """Test a match that times out is logged and treated as no pattern."""
        b = ShapesBuilder()
        shape = b.node_shape("S", target_subjects_of=ex("text"))
        b.property(shape, ex("text"), pattern="^(a|aa)+$")
        data = TripleGraph([(ex("doc"), ex("text"), lit("a" * 60 + "!"))])
        options = ValidationOptions(parallelism=1, pattern_timeout_ms=50)

        start = time.monotonic()
        with caplog.at_level(logging.WARNING, logger="rdf_shapecheck.shacl.validators.strings"):
            report = validate(data, b.graph(), options)
        assert time.monotonic() - start < 5.0
        assert report.results == ()
        assert report.conforms is True
        assert "Skipping pattern check" in caplog.text

    def test_bad_constraint_does_not_stop_validation(self):
        """Test a malformed constraint is dropped while its siblings still validate."""
        b = ShapesBuilder()
        shape = b.node_shape("S", target_class=ex("Person"))
        b.property(shape, ex("name"), min_count=2, max_inclusive="lots")
        report = validate(people(1), b.graph(), SEQUENTIAL)
        assert [r.component for r in report.results] == [ConstraintComponent.MIN_COUNT]


# ============================================================================
# Inputs and options
# ============================================================================

class TestInputs:
    """Tests for engine inputs."""

    def test_unreadable_shapes_graph_is_fatal(self):
        with pytest.raises(ShapesParseError):
            validate(people(1), TripleGraph(), SEQUENTIAL)

    def test_invalid_options(self):
        with pytest.raises(EngineError, match="Invalid validation options"):
            ValidationEngine(ValidationOptions(parallelism=0))

    def test_wrong_data_graph_type(self):
        with pytest.raises(EngineError):
            validate([], person_shapes(min_count=1), SEQUENTIAL)

    def test_wrong_shapes_type(self):
        with pytest.raises(EngineError):
            validate(people(1), "shapes.ttl", SEQUENTIAL)

    def test_reuse_parsed_model(self):
        """Test a pre-parsed model is used as-is across runs."""
        model = read_shapes(person_shapes(min_count=1))
        engine = ValidationEngine(SEQUENTIAL)
        assert engine.load_shapes(model) is model
        assert engine.validate(people(3), model).conforms
        assert not engine.validate(people(3, named=False), model).conforms


# ============================================================================
# Scheduling
# ============================================================================

class TestScheduling:
    """Tests for fail-fast, deadlines and failure isolation."""

    def test_stats(self):
        report = validate(people(5), person_shapes(min_count=1), SEQUENTIAL)
        stats = report.stats
        assert stats.state == ValidationState.COMPLETED
        assert stats.shapes == 1
        assert stats.focus_nodes == 5
        assert stats.units_total == stats.units_run == 5
        assert stats.units_skipped == 0
        assert stats.duration_ms >= 0

    def test_fail_fast_sequential(self):
        """Test fail_fast stops after the first violating unit."""
        options = ValidationOptions(parallelism=1, fail_fast=True)
        report = validate(people(20, named=False), person_shapes(min_count=1), options)
        assert report.truncated is True
        assert len(report.results) == 1
        assert report.stats.state == ValidationState.TRUNCATED
        assert report.stats.units_skipped == 19

    def test_fail_fast_parallel_skips_units(self):
        options = ValidationOptions(parallelism=2, fail_fast=True)
        report = validate(people(200, named=False), person_shapes(min_count=1), options)
        assert report.truncated is True
        assert not report.conforms
        assert report.stats.units_run < 200

    def test_fail_fast_without_violations(self):
        options = ValidationOptions(parallelism=1, fail_fast=True)
        report = validate(people(5), person_shapes(min_count=1), options)
        assert report.truncated is False
        assert report.conforms

    def test_fail_fast_on_last_unit_is_not_truncated(self):
        options = ValidationOptions(parallelism=1, fail_fast=True)
        data = TripleGraph([(ex("only"), RDF_TYPE, ex("Person"))])
        report = validate(data, person_shapes(min_count=1), options)
        assert report.truncated is False
        assert len(report.results) == 1

    @pytest.mark.parametrize("parallelism", [1, 4])
    def test_expired_deadline_marks_incomplete(self, parallelism):
        """Test a deadline that has already passed schedules nothing."""
        options = ValidationOptions(parallelism=parallelism, deadline=timedelta(0))
        report = validate(people(10, named=False), person_shapes(min_count=1), options)
        assert report.incomplete is True
        assert report.results == ()
        assert report.stats.units_run == 0

    def test_generous_deadline_completes(self):
        options = ValidationOptions(parallelism=2, deadline=60)
        report = validate(people(10), person_shapes(min_count=1), options)
        assert report.incomplete is False
        assert report.stats.units_run == 10

    def test_deadline_logged(self, caplog):
        options = ValidationOptions(parallelism=1, deadline=0)
        with caplog.at_level(logging.WARNING, logger="rdf_shapecheck.shacl.engine"):
            validate(people(3), person_shapes(min_count=1), options)
        assert "Deadline reached" in caplog.text

    @pytest.mark.parametrize("parallelism", [1, 3])
    def test_validator_crash_becomes_internal_error(self, monkeypatch, caplog, parallelism):
        """Test a raising validator yields an internal-error result, not an exception."""
        real = engine_module.validate_constraints

        def flaky(ctx, focus, shape):
            if focus == ex("p001"):
                raise RuntimeError("boom")
            return real(ctx, focus, shape)

        monkeypatch.setattr(engine_module, "validate_constraints", flaky)
        options = ValidationOptions(parallelism=parallelism)
        with caplog.at_level(logging.ERROR, logger="rdf_shapecheck.shacl.engine"):
            report = validate(people(3), person_shapes(min_count=1), options)

        assert len(report.results) == 1
        result = report.results[0]
        assert result.component == ConstraintComponent.INTERNAL_ERROR
        assert result.severity == Severity.VIOLATION
        assert "boom" in result.message
        assert report.stats.internal_errors == 1
        assert report.stats.units_run == 3
        assert "Validator failed" in caplog.text

    def test_run_summary_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="rdf_shapecheck.shacl.engine"):
            validate(people(2), person_shapes(min_count=1), SEQUENTIAL)
        assert "Validated 2 focus nodes against 1 shapes" in caplog.text
