"""
Validation options for rdf-shapecheck.

Provides:
- The explicit options object passed to every validation run
- Dict / JSON-file round-tripping
- Options validation
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_PATTERN_LENGTH = 500
DEFAULT_PATTERN_TIMEOUT_MS = 100
DEFAULT_MAX_LIST_DEPTH = 100


def default_parallelism() -> int:
    """Logical core count, at least 1."""
    return os.cpu_count() or 1


class ConfigValidationError(Exception):
    """Options validation error."""
    pass


@dataclass
class ValidationOptions:
    """
    Options for a validation run.

    Attributes:
        max_pattern_length: Patterns longer than this (UTF-8 bytes) are rejected
        pattern_timeout_ms: Deadline for compiling, and for each match of, a pattern
        max_list_depth: Maximum number of links followed in an sh:in list
        parallelism: Worker pool width for validation units
        fail_fast: Stop scheduling after the first violation
        deadline: Overall time limit (seconds or timedelta); None = unbounded
        subclass_inference: Honor rdfs:subClassOf for sh:class and sh:targetClass
    """
    max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH
    pattern_timeout_ms: int = DEFAULT_PATTERN_TIMEOUT_MS
    max_list_depth: int = DEFAULT_MAX_LIST_DEPTH
    parallelism: int = field(default_factory=default_parallelism)
    fail_fast: bool = False
    deadline: Optional[Union[float, timedelta]] = None
    subclass_inference: bool = False

    @property
    def pattern_timeout_seconds(self) -> float:
        return self.pattern_timeout_ms / 1000.0

    @property
    def deadline_seconds(self) -> Optional[float]:
        if self.deadline is None:
            return None
        if isinstance(self.deadline, timedelta):
            return self.deadline.total_seconds()
        return float(self.deadline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_pattern_length": self.max_pattern_length,
            "pattern_timeout_ms": self.pattern_timeout_ms,
            "max_list_depth": self.max_list_depth,
            "parallelism": self.parallelism,
            "fail_fast": self.fail_fast,
            "deadline": self.deadline_seconds,
            "subclass_inference": self.subclass_inference,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationOptions":
        return cls(
            max_pattern_length=data.get("max_pattern_length", DEFAULT_MAX_PATTERN_LENGTH),
            pattern_timeout_ms=data.get("pattern_timeout_ms", DEFAULT_PATTERN_TIMEOUT_MS),
            max_list_depth=data.get("max_list_depth", DEFAULT_MAX_LIST_DEPTH),
            parallelism=data.get("parallelism") or default_parallelism(),
            fail_fast=data.get("fail_fast", False),
            deadline=data.get("deadline"),
            subclass_inference=data.get("subclass_inference", False),
        )

    def save(self, path: Path) -> None:
        """Save options to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "ValidationOptions":
        """Load options from a JSON file; missing file gives defaults."""
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        logger.debug(f"No options file at {path}, using defaults")
        return cls()


class OptionsValidator:
    """Validates validation options."""

    @staticmethod
    def validate(options: ValidationOptions) -> List[str]:
        """
        Validate options.

        Returns list of error messages (empty if valid).
        """
        errors = []

        if options.max_pattern_length < 1:
            errors.append("max_pattern_length must be at least 1")

        if options.pattern_timeout_ms <= 0:
            errors.append("pattern_timeout_ms must be positive")

        if options.max_list_depth < 1:
            errors.append("max_list_depth must be at least 1")

        if options.parallelism < 1:
            errors.append("parallelism must be at least 1")

        deadline = options.deadline_seconds
        if deadline is not None and deadline < 0:
            errors.append("deadline cannot be negative")

        return errors

    @staticmethod
    def validate_or_raise(options: ValidationOptions) -> None:
        """Validate options, raising on errors."""
        errors = OptionsValidator.validate(options)
        if errors:
            raise ConfigValidationError("; ".join(errors))
