"""Test-case log segmentation over a log file shared by concurrent tests.

Two states, a single linear pass:

    Idle       scanning for the start line of the requested test case
    Capturing  appending relevant lines until a stop condition

While capturing, each line is checked in order for:

    1. explicit end   pass/fail marker (+ correlation id when set), included
    2. log bleed      another test's start marker, excluded
    3. relevance      contains the test name or the correlation id
    4. budget         stop once ``budget`` lines are captured
"""

import logging
import re
from itertools import islice
from typing import Iterable

from caselog.config import (
    DEFAULT_CAPTURE_BUDGET,
    ExtractorConfig,
    MarkerSet,
    validate_budget,
    validate_markers,
)
from caselog.errors import InvalidQuery
from caselog.models import QueryKey, Segment, StopReason
from caselog.reader import read_lines, resolve_log_path

logger = logging.getLogger(__name__)


def validate_query(key: QueryKey) -> QueryKey:
    """Reject a blank test case name; normalize a blank correlation id to None."""
    name = key.test_case_name
    if not isinstance(name, str) or not name.strip():
        raise InvalidQuery("test_case_name must be a non-empty string")
    if not key.correlation_id or not key.correlation_id.strip():
        return QueryKey(test_case_name=name)
    return key


class LineMatcher:
    """Precompiled predicates for one query.

    Markers, name and id are user-controlled literals, so every one of them
    is escaped before compiling.
    """

    def __init__(self, markers: MarkerSet, key: QueryKey, case_sensitive: bool = True):
        flags = 0 if case_sensitive else re.IGNORECASE
        self._start = re.compile(re.escape(markers.start), flags)
        self._end = re.compile(
            f"{re.escape(markers.end_success)}|{re.escape(markers.end_failure)}", flags
        )
        self._name = re.compile(re.escape(key.test_case_name), flags)
        self._id = (
            re.compile(re.escape(key.correlation_id), flags)
            if key.correlation_id else None
        )

    @property
    def has_id(self) -> bool:
        return self._id is not None

    def _contains_id(self, line: str) -> bool:
        return self._id is not None and self._id.search(line) is not None

    def is_start(self, line: str, require_id: bool = True) -> bool:
        if not (self._start.search(line) and self._name.search(line)):
            return False
        if require_id and self._id is not None:
            return self._contains_id(line)
        return True

    def is_end(self, line: str) -> bool:
        if not self._end.search(line):
            return False
        return self._id is None or self._contains_id(line)

    def is_next_test(self, line: str) -> bool:
        if not self._start.search(line) or self._name.search(line):
            return False
        return not self._contains_id(line)

    def is_relevant(self, line: str) -> bool:
        return self._name.search(line) is not None or self._contains_id(line)


def find_start(lines: list[str], matcher: LineMatcher) -> tuple[int | None, bool]:
    """Return (index of the start line, matched on fallback tier).

    The strict predicate is tried across the whole input first. Only when it
    never fires and a correlation id is set is name + start marker accepted.
    """
    for i, line in enumerate(lines):
        if matcher.is_start(line):
            return i, False
    if matcher.has_id:
        for i, line in enumerate(lines):
            if matcher.is_start(line, require_id=False):
                return i, True
    return None, False


def extract(
    lines: Iterable[str],
    key: QueryKey,
    markers: MarkerSet | None = None,
    budget: int = DEFAULT_CAPTURE_BUDGET,
    case_sensitive: bool = True,
) -> Segment:
    """Extract the log segment of one test case execution from ``lines``."""
    key = validate_query(key)
    markers = markers or MarkerSet()
    validate_markers(markers)
    validate_budget(budget)

    snapshot = [line.rstrip("\r\n") for line in lines]
    matcher = LineMatcher(markers, key, case_sensitive)

    start, fallback = find_start(snapshot, matcher)
    if start is None:
        logger.debug("No start line for %r (id=%r) in %d lines",
                     key.test_case_name, key.correlation_id, len(snapshot))
        return Segment.not_found()
    if fallback:
        logger.debug("Start for %r matched without correlation id %r at line %d",
                     key.test_case_name, key.correlation_id, start + 1)

    captured = [snapshot[start]]
    reason = StopReason.BUDGET if len(captured) >= budget else StopReason.END_OF_INPUT

    if reason is not StopReason.BUDGET:
        for line in islice(snapshot, start + 1, None):
            if matcher.is_end(line):
                captured.append(line)
                reason = StopReason.END_MARKER
                break
            if matcher.is_next_test(line):
                reason = StopReason.NEXT_TEST
                break
            if not matcher.is_relevant(line):
                continue
            captured.append(line)
            if len(captured) >= budget:
                reason = StopReason.BUDGET
                break

    logger.debug("Captured %d lines for %r from line %d, stopped on %s",
                 len(captured), key.test_case_name, start + 1, reason.value)
    return Segment(
        lines=tuple(captured),
        reason=reason,
        start_line=start + 1,
        fallback=fallback,
    )


class SegmentExtractor:
    """Extractor bound to one loaded configuration.

    Holds no mutable state, so one instance can serve every test thread.
    """

    def __init__(self, config: ExtractorConfig | None = None):
        self.config = (config or ExtractorConfig()).validate()

    def extract(self, lines: Iterable[str], key: QueryKey) -> Segment:
        return extract(
            lines,
            key,
            markers=self.config.markers,
            budget=self.config.capture_budget,
            case_sensitive=self.config.case_sensitive,
        )

    def extract_file(self, key: QueryKey, path: str | None = None) -> Segment:
        """Read a fresh snapshot of the log file and extract from it.

        ``path`` falls back to the configured default when None or blank.
        """
        key = validate_query(key)
        filepath = resolve_log_path(path, self.config.default_log_path)
        lines = read_lines(filepath, encoding=self.config.encoding)
        return self.extract(lines, key)
