"""
RDF Terms and Term Dictionary.

Implements the term model consumed by the validation engine:
IRIs, blank nodes and literals, plus a dictionary that maps terms to
dense integer ids for columnar storage.

Key design decisions:
- Terms are frozen value objects: equality is structural, so two literals
  are equal only when lexical form, datatype and language tag all match
- Literals always carry a datatype (xsd:string / rdf:langString by default)
- Integer ids are allocated per dictionary, never shared between graphs
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Optional, Union


XSD_NS = "http://www.w3.org/2001/XMLSchema#"
RDF_LANGSTRING = "http://www.w3.org/1999/02/22-rdf-syntax-ns#langString"
XSD_STRING = f"{XSD_NS}string"
XSD_BOOLEAN = f"{XSD_NS}boolean"

# Datatypes whose value space is a subset of the integers
INTEGER_DATATYPES = frozenset(
    f"{XSD_NS}{name}"
    for name in (
        "integer", "int", "long", "short", "byte",
        "nonNegativeInteger", "positiveInteger",
        "nonPositiveInteger", "negativeInteger",
        "unsignedLong", "unsignedInt", "unsignedShort", "unsignedByte",
    )
)

FLOAT_DATATYPES = frozenset(
    f"{XSD_NS}{name}" for name in ("decimal", "float", "double")
)

NUMERIC_DATATYPES = INTEGER_DATATYPES | FLOAT_DATATYPES


# =============================================================================
# Term Representation
# =============================================================================

class TermKind(IntEnum):
    """RDF term kind enumeration."""
    IRI = 0
    LITERAL = 1
    BNODE = 2


TermId = int


@dataclass(frozen=True, slots=True)
class Term:
    """
    An RDF term.

    Attributes:
        kind: The type of term (IRI, LITERAL, BNODE)
        lex: Lexical form (IRI string, literal value, bnode label)
        datatype: Datatype IRI (literals only)
        lang: Language tag (language-tagged literals only)
    """
    kind: TermKind
    lex: str
    datatype: Optional[str] = None
    lang: Optional[str] = None

    @classmethod
    def iri(cls, value: str) -> "Term":
        """Create an IRI term."""
        return cls(kind=TermKind.IRI, lex=value)

    @classmethod
    def bnode(cls, label: str) -> "Term":
        """Create a blank node term."""
        if label.startswith("_:"):
            label = label[2:]
        return cls(kind=TermKind.BNODE, lex=label)

    @classmethod
    def literal(
        cls,
        value: Any,
        datatype: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> "Term":
        """
        Create a literal term.

        Python values are converted to their canonical lexical form when no
        datatype is given: bool -> xsd:boolean, int -> xsd:integer,
        float -> xsd:double, Decimal -> xsd:decimal.
        """
        if lang is not None:
            return cls(
                kind=TermKind.LITERAL,
                lex=str(value),
                datatype=RDF_LANGSTRING,
                lang=lang.lower(),
            )

        if datatype is None:
            if isinstance(value, bool):
                return cls(TermKind.LITERAL, "true" if value else "false", XSD_BOOLEAN)
            if isinstance(value, int):
                return cls(TermKind.LITERAL, str(value), f"{XSD_NS}integer")
            if isinstance(value, float):
                return cls(TermKind.LITERAL, repr(value), f"{XSD_NS}double")
            if isinstance(value, Decimal):
                return cls(TermKind.LITERAL, str(value), f"{XSD_NS}decimal")
            datatype = XSD_STRING

        if isinstance(value, bool):
            value = "true" if value else "false"
        return cls(kind=TermKind.LITERAL, lex=str(value), datatype=datatype)

    @property
    def is_iri(self) -> bool:
        return self.kind == TermKind.IRI

    @property
    def is_bnode(self) -> bool:
        return self.kind == TermKind.BNODE

    @property
    def is_literal(self) -> bool:
        return self.kind == TermKind.LITERAL

    @property
    def is_numeric(self) -> bool:
        """True when this is a literal whose value parses as a number."""
        value = self.to_python()
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    def to_python(self) -> Union[str, int, float, bool]:
        """
        Convert a literal to its Python value.

        Integer-family datatypes become int, decimal/float/double become
        float, xsd:boolean becomes bool. Anything else, including lexical
        forms that do not parse, stays a string. IRIs and blank nodes
        return their lexical form.
        """
        if self.kind != TermKind.LITERAL:
            return self.lex

        lex = self.lex.strip()
        if self.datatype in INTEGER_DATATYPES:
            try:
                return int(lex)
            except ValueError:
                return self.lex
        if self.datatype in FLOAT_DATATYPES:
            if lex in ("INF", "+INF"):
                return float("inf")
            if lex == "-INF":
                return float("-inf")
            try:
                return float(Decimal(lex))
            except (InvalidOperation, ValueError):
                return self.lex
        if self.datatype == XSD_BOOLEAN:
            if lex in ("true", "1"):
                return True
            if lex in ("false", "0"):
                return False
        return self.lex

    def n3(self) -> str:
        """Render the term in N-Triples syntax."""
        if self.kind == TermKind.IRI:
            return f"<{self.lex}>"
        if self.kind == TermKind.BNODE:
            return f"_:{self.lex}"

        escaped = (
            self.lex.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        if self.lang:
            return f'"{escaped}"@{self.lang}'
        if self.datatype and self.datatype != XSD_STRING:
            return f'"{escaped}"^^<{self.datatype}>'
        return f'"{escaped}"'

    def sort_key(self) -> tuple[int, str, str, str]:
        """Total order over terms, used for deterministic output."""
        return (int(self.kind), self.lex, self.datatype or "", self.lang or "")

    def __str__(self) -> str:
        return self.n3()


# =============================================================================
# Term Dictionary
# =============================================================================

class TermDict:
    """
    Dictionary-encoded term catalog.

    Maps RDF terms to integer TermIds. Ids are dense and start at 0, so the
    reverse map is a plain list.

    Thread-safety: interning is NOT thread-safe. Lookups on a dictionary that
    is no longer being written to are safe from any thread.
    """

    def __init__(self) -> None:
        self._term_to_id: dict[Term, TermId] = {}
        self._id_to_term: list[Term] = []

    def get_or_create(self, term: Term) -> TermId:
        """Intern a term, returning its TermId."""
        term_id = self._term_to_id.get(term)
        if term_id is None:
            term_id = len(self._id_to_term)
            self._term_to_id[term] = term_id
            self._id_to_term.append(term)
        return term_id

    def get_or_create_batch(self, terms: list[Term]) -> list[TermId]:
        """Bulk intern a batch of terms, preserving order."""
        return [self.get_or_create(term) for term in terms]

    def get_id(self, term: Term) -> Optional[TermId]:
        """Get the TermId for a term if it exists, without creating it."""
        return self._term_to_id.get(term)

    def lookup(self, term_id: TermId) -> Term:
        """Look up a term by its ID."""
        return self._id_to_term[term_id]

    def lookup_batch(self, term_ids: list[TermId]) -> list[Term]:
        """Bulk lookup terms by their IDs."""
        return [self._id_to_term[tid] for tid in term_ids]

    def __contains__(self, term: Term) -> bool:
        return term in self._term_to_id

    def __len__(self) -> int:
        return len(self._id_to_term)
