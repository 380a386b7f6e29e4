"""
Validation results and reports.

A ValidationReport is an immutable aggregate built once at the end of a
run. Results are kept sorted by (focus node, shape, path, component,
message) so two runs over the same inputs produce equal reports no matter
how the units were scheduled.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import Any, Iterable, Optional

from rdf_shapecheck.graph import TripleGraph
from rdf_shapecheck.shacl.model import ConstraintComponent, Severity
from rdf_shapecheck.terms import Term
from rdf_shapecheck.vocabulary import (
    RDF_TYPE,
    SH_CONFORMS,
    SH_FOCUS_NODE,
    SH_RESULT,
    SH_RESULT_MESSAGE,
    SH_RESULT_PATH,
    SH_RESULT_SEVERITY,
    SH_SOURCE_CONSTRAINT_COMPONENT,
    SH_SOURCE_SHAPE,
    SH_VALIDATION_REPORT,
    SH_VALIDATION_RESULT,
    SH_VALUE,
    XSD_BOOLEAN,
)

_NO_PATH = (-1, "", "", "")


@dataclass(frozen=True)
class ValidationResult:
    """
    A single validation result.

    Attributes:
        severity: Severity inherited from the source shape
        focus_node: Node the shape was applied to
        shape_id: Source shape
        path: Property path of the source shape (None for node-level checks)
        message: sh:message of the shape, or a generated description
        component: Constraint component that produced the result
        value: The offending value node, when there is one
        details: Machine-readable specifics, e.g. {"actual": 2, "expected": 3}
    """
    severity: Severity
    focus_node: Term
    shape_id: Term
    path: Optional[Term]
    message: str
    component: ConstraintComponent
    value: Optional[Term] = None
    details: dict[str, Any] = field(default_factory=dict, hash=False)

    def sort_key(self) -> tuple:
        return (
            self.focus_node.sort_key(),
            self.shape_id.sort_key(),
            self.path.sort_key() if self.path is not None else _NO_PATH,
            self.component.value,
            self.message,
            self.value.sort_key() if self.value is not None else _NO_PATH,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "focusNode": self.focus_node.n3(),
            "resultPath": self.path.n3() if self.path is not None else None,
            "value": self.value.n3() if self.value is not None else None,
            "sourceShape": self.shape_id.n3(),
            "sourceConstraintComponent": self.component.value,
            "resultMessage": self.message,
            "resultSeverity": self.severity.value,
            "details": {key: _plain(value) for key, value in self.details.items()},
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Term):
        return value.n3()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return value


class ValidationState(IntEnum):
    """How a validation run ended."""
    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    TRUNCATED = auto()    # fail_fast stopped scheduling
    INCOMPLETE = auto()   # deadline stopped scheduling


@dataclass
class ValidationStats:
    """Statistics for one validation run."""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    state: ValidationState = ValidationState.PENDING
    shapes: int = 0
    focus_nodes: int = 0
    units_total: int = 0
    units_run: int = 0
    internal_errors: int = 0

    @property
    def units_skipped(self) -> int:
        return self.units_total - self.units_run

    @property
    def duration_ms(self) -> float:
        """Run duration in milliseconds."""
        if self.start_time is None:
            return 0.0
        end = self.end_time or time.monotonic()
        return (end - self.start_time) * 1000

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "duration_ms": self.duration_ms,
            "state": self.state.name,
            "shapes": self.shapes,
            "focus_nodes": self.focus_nodes,
            "units_total": self.units_total,
            "units_run": self.units_run,
            "units_skipped": self.units_skipped,
            "internal_errors": self.internal_errors,
        }


@dataclass(frozen=True)
class ValidationReport:
    """
    SHACL validation report.

    Attributes:
        results: Results in deterministic order
        truncated: fail_fast stopped the run after the first violation
        incomplete: the deadline stopped the run before every unit ran
        stats: Run statistics (not part of equality)
    """
    results: tuple[ValidationResult, ...] = ()
    truncated: bool = False
    incomplete: bool = False
    stats: Optional[ValidationStats] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_results(
        cls,
        results: Iterable[ValidationResult],
        truncated: bool = False,
        incomplete: bool = False,
        stats: Optional[ValidationStats] = None,
    ) -> "ValidationReport":
        """Build a report, sorting the results."""
        return cls(
            results=tuple(sorted(results, key=ValidationResult.sort_key)),
            truncated=truncated,
            incomplete=incomplete,
            stats=stats,
        )

    @property
    def conforms(self) -> bool:
        """True iff no result has severity Violation."""
        return not any(r.severity == Severity.VIOLATION for r in self.results)

    def sorted(self) -> list[ValidationResult]:
        """Results ordered by (focus node, shape, path)."""
        return sorted(self.results, key=ValidationResult.sort_key)

    def violations(self) -> list[ValidationResult]:
        """Get all violations."""
        return self.by_severity(Severity.VIOLATION)

    def warnings(self) -> list[ValidationResult]:
        """Get all warnings."""
        return self.by_severity(Severity.WARNING)

    def infos(self) -> list[ValidationResult]:
        """Get all info messages."""
        return self.by_severity(Severity.INFO)

    def by_severity(self, severity: Severity) -> list[ValidationResult]:
        return [r for r in self.results if r.severity == severity]

    def group_by_focus_node(self) -> dict[Term, list[ValidationResult]]:
        groups: dict[Term, list[ValidationResult]] = {}
        for result in self.results:
            groups.setdefault(result.focus_node, []).append(result)
        return groups

    def for_shape(self, shape_id: Term) -> list[ValidationResult]:
        return [r for r in self.results if r.shape_id == shape_id]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        data = {
            "conforms": self.conforms,
            "truncated": self.truncated,
            "incomplete": self.incomplete,
            "results": [r.to_dict() for r in self.results],
            "violationCount": len(self.violations()),
            "warningCount": len(self.warnings()),
            "infoCount": len(self.infos()),
        }
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        return data

    def to_graph(self) -> TripleGraph:
        """The report as triples in the SHACL report vocabulary."""
        report = Term.bnode("report")
        triples = [
            (report, RDF_TYPE, SH_VALIDATION_REPORT),
            (report, SH_CONFORMS, _boolean(self.conforms)),
        ]
        for i, result in enumerate(self.results):
            node = Term.bnode(f"result{i}")
            triples.append((report, SH_RESULT, node))
            triples.append((node, RDF_TYPE, SH_VALIDATION_RESULT))
            triples.extend((node, p, o) for p, o in _result_properties(result))
        return TripleGraph(triples)

    def to_turtle(self) -> str:
        """Convert to RDF Turtle representation."""
        lines = [
            "@prefix sh: <http://www.w3.org/ns/shacl#> .",
            "",
            "[] a sh:ValidationReport ;",
            f"    sh:conforms {'true' if self.conforms else 'false'} ;",
        ]

        if self.results:
            blocks = [self._result_to_turtle(result) for result in self.results]
            lines.append("    sh:result " + ", ".join(blocks) + " .")
        else:
            lines[-1] = lines[-1].rstrip(" ;") + " ."

        return "\n".join(lines) + "\n"

    def _result_to_turtle(self, result: ValidationResult) -> str:
        parts = ["        a sh:ValidationResult"]
        for predicate, obj in _result_properties(result):
            name = predicate.lex.rsplit("#", 1)[-1]
            parts.append(f"        sh:{name} {obj.n3()}")
        return "[\n" + " ;\n".join(parts) + "\n    ]"


def _boolean(value: bool) -> Term:
    return Term.literal("true" if value else "false", datatype=XSD_BOOLEAN)


def _result_properties(result: ValidationResult) -> list[tuple[Term, Term]]:
    properties = [(SH_FOCUS_NODE, result.focus_node)]
    if result.path is not None:
        properties.append((SH_RESULT_PATH, result.path))
    if result.value is not None:
        properties.append((SH_VALUE, result.value))
    properties.extend([
        (SH_SOURCE_SHAPE, result.shape_id),
        (SH_SOURCE_CONSTRAINT_COMPONENT, Term.iri(result.component.value)),
        (SH_RESULT_MESSAGE, Term.literal(result.message)),
        (SH_RESULT_SEVERITY, Term.iri(result.severity.value)),
    ])
    return properties
