"""
Read-only triple graph backed by Polars.

Provides the query surface the validation engine needs:
- objects of a (subject, predicate) pair
- subjects of a (predicate, object) pair
- predicate-wide scans for target selection

Terms are dictionary-encoded (see terms.TermDict) and facts live in a
Polars DataFrame of integer ids. A graph is immutable after construction,
so it can be shared between validation threads without locking.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional

import polars as pl

from rdf_shapecheck.terms import Term, TermDict, TermId
from rdf_shapecheck.vocabulary import RDF_TYPE, RDFS_SUBCLASS_OF

if TYPE_CHECKING:
    import rdflib

logger = logging.getLogger(__name__)

Triple = tuple[Term, Term, Term]

_FACT_SCHEMA = {"s": pl.UInt32, "p": pl.UInt32, "o": pl.UInt32}


class TripleGraph:
    """
    An immutable, in-memory collection of RDF triples.

    Usage:
        graph = TripleGraph([
            (Term.iri("http://ex.org/a"), RDF_TYPE, Term.iri("http://ex.org/Person")),
        ])
        graph.objects(Term.iri("http://ex.org/a"), RDF_TYPE)
    """

    def __init__(self, triples: Iterable[Triple] = ()) -> None:
        self._terms = TermDict()
        subjects: list[TermId] = []
        predicates: list[TermId] = []
        objects: list[TermId] = []

        for s, p, o in triples:
            if s.is_literal:
                raise ValueError(f"Literal subject not allowed: {s.n3()}")
            if not p.is_iri:
                raise ValueError(f"Predicate must be an IRI: {p.n3()}")
            subjects.append(self._terms.get_or_create(s))
            predicates.append(self._terms.get_or_create(p))
            objects.append(self._terms.get_or_create(o))

        self._facts = pl.DataFrame(
            {"s": subjects, "p": predicates, "o": objects},
            schema=_FACT_SCHEMA,
        ).unique(maintain_order=True)

        # subject -> predicate -> [object]
        self._index: dict[TermId, dict[TermId, list[TermId]]] = {}
        for s, p, o in self._facts.iter_rows():
            self._index.setdefault(s, {}).setdefault(p, []).append(o)

    @classmethod
    def from_rdflib(cls, graph: "rdflib.Graph") -> "TripleGraph":
        """
        Build a TripleGraph from an rdflib graph.

        Requires the optional ``rdflib`` dependency.
        """
        return cls(
            (term_from_rdflib(s), term_from_rdflib(p), term_from_rdflib(o))
            for s, p, o in graph
        )

    # =========================================================================
    # Term-level lookups
    # =========================================================================

    def objects(self, subject: Term, predicate: Term) -> list[Term]:
        """All objects of triples (subject, predicate, ?o), in insertion order."""
        sid = self._terms.get_id(subject)
        pid = self._terms.get_id(predicate)
        if sid is None or pid is None:
            return []
        ids = self._index.get(sid, {}).get(pid, [])
        return self._terms.lookup_batch(ids)

    def value(self, subject: Term, predicate: Term) -> Optional[Term]:
        """First object of (subject, predicate, ?o), or None."""
        values = self.objects(subject, predicate)
        return values[0] if values else None

    def predicate_objects(self, subject: Term) -> list[tuple[Term, Term]]:
        """All (predicate, object) pairs for a subject."""
        sid = self._terms.get_id(subject)
        if sid is None:
            return []
        lookup = self._terms.lookup
        return [
            (lookup(pid), lookup(oid))
            for pid, oids in self._index.get(sid, {}).items()
            for oid in oids
        ]

    def subjects(self, predicate: Term, obj: Term) -> list[Term]:
        """All subjects of triples (?s, predicate, obj)."""
        pid = self._terms.get_id(predicate)
        oid = self._terms.get_id(obj)
        if pid is None or oid is None:
            return []
        ids = (
            self._facts.filter((pl.col("p") == pid) & (pl.col("o") == oid))
            .get_column("s")
            .unique(maintain_order=True)
            .to_list()
        )
        return self._terms.lookup_batch(ids)

    def subjects_with_predicate(self, predicate: Term) -> list[Term]:
        """Distinct subjects of any triple using the predicate."""
        return self._column_for_predicate(predicate, "s")

    def objects_with_predicate(self, predicate: Term) -> list[Term]:
        """Distinct objects of any triple using the predicate."""
        return self._column_for_predicate(predicate, "o")

    def _column_for_predicate(self, predicate: Term, column: str) -> list[Term]:
        pid = self._terms.get_id(predicate)
        if pid is None:
            return []
        ids = (
            self._facts.filter(pl.col("p") == pid)
            .get_column(column)
            .unique(maintain_order=True)
            .to_list()
        )
        return self._terms.lookup_batch(ids)

    # =========================================================================
    # Class helpers
    # =========================================================================

    def types(self, node: Term) -> list[Term]:
        """The rdf:type values asserted for a node."""
        return self.objects(node, RDF_TYPE)

    def instances_of(self, cls: Term) -> list[Term]:
        """Nodes with an rdf:type triple naming exactly this class."""
        return self.subjects(RDF_TYPE, cls)

    def subclasses(self, cls: Term) -> set[Term]:
        """
        The class itself plus every transitive rdfs:subClassOf descendant.

        Cycles in the subclass hierarchy are tolerated.
        """
        seen = {cls}
        frontier = [cls]
        while frontier:
            current = frontier.pop()
            for sub in self.subjects(RDFS_SUBCLASS_OF, current):
                if sub not in seen:
                    seen.add(sub)
                    frontier.append(sub)
        return seen

    # =========================================================================
    # Statistics and iteration
    # =========================================================================

    def predicate_counts(self) -> dict[Term, int]:
        """Number of triples per predicate, most frequent first."""
        counts = (
            self._facts.group_by("p")
            .agg(pl.col("s").count().alias("count"))
            .sort(["count", "p"], descending=[True, False])
        )
        return {
            self._terms.lookup(pid): count
            for pid, count in counts.iter_rows()
        }

    def to_dataframe(self) -> pl.DataFrame:
        """The fact table with terms rendered in N-Triples syntax."""
        lookup = self._terms.lookup
        return pl.DataFrame(
            [
                (lookup(s).n3(), lookup(p).n3(), lookup(o).n3())
                for s, p, o in self._facts.iter_rows()
            ],
            schema={"subject": pl.Utf8, "predicate": pl.Utf8, "object": pl.Utf8},
            orient="row",
        )

    def __iter__(self) -> Iterator[Triple]:
        lookup = self._terms.lookup
        for s, p, o in self._facts.iter_rows():
            yield lookup(s), lookup(p), lookup(o)

    def __len__(self) -> int:
        return self._facts.height

    def __contains__(self, triple: Triple) -> bool:
        s, p, o = triple
        return o in self.objects(s, p)

    def __repr__(self) -> str:
        return f"<TripleGraph triples={len(self)} terms={len(self._terms)}>"


def term_from_rdflib(node: Any) -> Term:
    """Convert an rdflib node (URIRef, BNode, Literal) to a Term."""
    from rdflib import BNode, Literal, URIRef

    if isinstance(node, URIRef):
        return Term.iri(str(node))
    if isinstance(node, BNode):
        return Term.bnode(str(node))
    if isinstance(node, Literal):
        if node.language:
            return Term.literal(str(node), lang=node.language)
        datatype = str(node.datatype) if node.datatype is not None else None
        return Term.literal(str(node), datatype=datatype)
    raise TypeError(f"Unsupported rdflib node: {node!r}")
