"""
Bounded regular expressions for sh:pattern.

Provides:
- Length limit on pattern source
- Compilation on a worker thread with a wall-clock deadline
- Matching with a per-call timeout

Patterns use the ``regex`` engine, which can interrupt a running match
once its timeout elapses. Catastrophic backtracking therefore costs at most
one timeout per value instead of hanging the run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Any, Optional

import regex

from rdf_shapecheck.shacl.errors import PatternError, PatternTimeoutError

logger = logging.getLogger(__name__)

# sh:flags letters (XPath fn:matches) -> regex flags
FLAG_MAP = {
    "i": regex.IGNORECASE,
    "m": regex.MULTILINE,
    "s": regex.DOTALL,
    "x": regex.VERBOSE,
}


def parse_flags(flags: str) -> int:
    """Translate an sh:flags string into regex flags."""
    value = 0
    for letter in flags:
        if letter not in FLAG_MAP:
            raise PatternError(f"Unsupported pattern flag {letter!r}")
        value |= FLAG_MAP[letter]
    return value


@dataclass(frozen=True)
class BoundedPattern:
    """
    A compiled pattern with its match timeout.

    Equality and hashing use the source text and flags only.
    """
    source: str
    flags: str = ""
    timeout: float = field(default=0.1, compare=False)
    compiled: Any = field(default=None, compare=False, repr=False)

    def search(self, text: str) -> bool:
        """
        True when the pattern matches anywhere in text.

        Raises:
            PatternTimeoutError: if the match runs past the timeout
        """
        try:
            return self.compiled.search(text, timeout=self.timeout) is not None
        except TimeoutError as e:
            raise PatternTimeoutError(
                f"Pattern {self.source!r} exceeded match timeout of {self.timeout}s"
            ) from e


def compile_with_deadline(source: str, flags: int, timeout: float) -> Any:
    """
    Compile a pattern on a worker thread, giving up after timeout seconds.

    A compile that overruns is abandoned, not joined: the worker keeps
    running in the background until the regex engine returns.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pattern-compile")
    future = executor.submit(regex.compile, source, flags)
    try:
        return future.result(timeout=timeout)
    except FuturesTimeoutError:
        future.cancel()
        raise PatternTimeoutError(
            f"Pattern {source!r} exceeded compile timeout of {timeout}s"
        )
    except regex.error as e:
        raise PatternError(f"Invalid pattern {source!r}: {e}") from e
    finally:
        executor.shutdown(wait=False)


def compile_bounded(
    source: str,
    flags: str = "",
    *,
    max_length: int,
    timeout: float,
) -> BoundedPattern:
    """
    Build a BoundedPattern.

    Raises:
        PatternError: pattern too long, bad flags, or compile failure
        PatternTimeoutError: compilation exceeded the deadline
    """
    size = len(source.encode("utf-8"))
    if size > max_length:
        raise PatternError(
            f"Pattern of {size} bytes exceeds maximum length {max_length}"
        )
    compiled = compile_with_deadline(source, parse_flags(flags), timeout)
    return BoundedPattern(source=source, flags=flags, timeout=timeout, compiled=compiled)


class PatternCache:
    """
    Memo of compiled patterns for one shapes model.

    Keyed by (source, flags); a shapes model owns exactly one cache, so
    discarding the model discards its compiled patterns.
    """

    def __init__(self, max_length: int, timeout: float) -> None:
        self.max_length = max_length
        self.timeout = timeout
        self._patterns: dict[tuple[str, str], BoundedPattern] = {}
        self.hits = 0

    def get(self, source: str, flags: str = "") -> BoundedPattern:
        key = (source, flags)
        cached: Optional[BoundedPattern] = self._patterns.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        pattern = compile_bounded(
            source, flags, max_length=self.max_length, timeout=self.timeout
        )
        self._patterns[key] = pattern
        return pattern

    def __len__(self) -> int:
        return len(self._patterns)
