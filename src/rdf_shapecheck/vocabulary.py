"""
Vocabulary constants for SHACL validation.

Namespaces are plain strings; the terms the engine matches against are
pre-built Term objects. Everything here is read-only module state.
"""

from rdf_shapecheck.terms import Term

# Namespaces
SH = "http://www.w3.org/ns/shacl#"
XSD = "http://www.w3.org/2001/XMLSchema#"
RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS = "http://www.w3.org/2000/01/rdf-schema#"

# RDF / RDFS
RDF_TYPE = Term.iri(f"{RDF}type")
RDF_FIRST = Term.iri(f"{RDF}first")
RDF_REST = Term.iri(f"{RDF}rest")
RDF_NIL = Term.iri(f"{RDF}nil")
RDFS_CLASS = Term.iri(f"{RDFS}Class")
RDFS_SUBCLASS_OF = Term.iri(f"{RDFS}subClassOf")

# Shape typing
SH_NODE_SHAPE = Term.iri(f"{SH}NodeShape")
SH_PROPERTY_SHAPE = Term.iri(f"{SH}PropertyShape")

# Targets
SH_TARGET_CLASS = Term.iri(f"{SH}targetClass")
SH_TARGET_NODE = Term.iri(f"{SH}targetNode")
SH_TARGET_SUBJECTS_OF = Term.iri(f"{SH}targetSubjectsOf")
SH_TARGET_OBJECTS_OF = Term.iri(f"{SH}targetObjectsOf")

TARGET_PREDICATES = (
    SH_TARGET_CLASS,
    SH_TARGET_NODE,
    SH_TARGET_SUBJECTS_OF,
    SH_TARGET_OBJECTS_OF,
)

# Structure and metadata
SH_PROPERTY = Term.iri(f"{SH}property")
SH_PATH = Term.iri(f"{SH}path")
SH_SEVERITY = Term.iri(f"{SH}severity")
SH_MESSAGE = Term.iri(f"{SH}message")
SH_NAME = Term.iri(f"{SH}name")
SH_DESCRIPTION = Term.iri(f"{SH}description")
SH_DEACTIVATED = Term.iri(f"{SH}deactivated")

# Constraint parameters
SH_MIN_COUNT = Term.iri(f"{SH}minCount")
SH_MAX_COUNT = Term.iri(f"{SH}maxCount")
SH_DATATYPE = Term.iri(f"{SH}datatype")
SH_CLASS = Term.iri(f"{SH}class")
SH_NODE_KIND = Term.iri(f"{SH}nodeKind")
SH_PATTERN = Term.iri(f"{SH}pattern")
SH_FLAGS = Term.iri(f"{SH}flags")
SH_MIN_LENGTH = Term.iri(f"{SH}minLength")
SH_MAX_LENGTH = Term.iri(f"{SH}maxLength")
SH_IN = Term.iri(f"{SH}in")
SH_HAS_VALUE = Term.iri(f"{SH}hasValue")
SH_MIN_INCLUSIVE = Term.iri(f"{SH}minInclusive")
SH_MAX_INCLUSIVE = Term.iri(f"{SH}maxInclusive")
SH_MIN_EXCLUSIVE = Term.iri(f"{SH}minExclusive")
SH_MAX_EXCLUSIVE = Term.iri(f"{SH}maxExclusive")
SH_QUALIFIED_VALUE_SHAPE = Term.iri(f"{SH}qualifiedValueShape")
SH_QUALIFIED_MIN_COUNT = Term.iri(f"{SH}qualifiedMinCount")
SH_QUALIFIED_MAX_COUNT = Term.iri(f"{SH}qualifiedMaxCount")

# Severities
SH_VIOLATION = Term.iri(f"{SH}Violation")
SH_WARNING = Term.iri(f"{SH}Warning")
SH_INFO = Term.iri(f"{SH}Info")

# Report vocabulary
SH_VALIDATION_REPORT = Term.iri(f"{SH}ValidationReport")
SH_VALIDATION_RESULT = Term.iri(f"{SH}ValidationResult")
SH_CONFORMS = Term.iri(f"{SH}conforms")
SH_RESULT = Term.iri(f"{SH}result")
SH_FOCUS_NODE = Term.iri(f"{SH}focusNode")
SH_RESULT_PATH = Term.iri(f"{SH}resultPath")
SH_VALUE = Term.iri(f"{SH}value")
SH_SOURCE_SHAPE = Term.iri(f"{SH}sourceShape")
SH_SOURCE_CONSTRAINT_COMPONENT = Term.iri(f"{SH}sourceConstraintComponent")
SH_RESULT_MESSAGE = Term.iri(f"{SH}resultMessage")
SH_RESULT_SEVERITY = Term.iri(f"{SH}resultSeverity")

XSD_STRING = f"{XSD}string"
XSD_BOOLEAN = f"{XSD}boolean"
XSD_INTEGER = f"{XSD}integer"
