"""Query and result types for log segment extraction."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class QueryKey:
    test_case_name: str
    correlation_id: str | None = None   # e.g. driver handle, narrows matching


class StopReason(Enum):
    END_MARKER = "end_marker"      # explicit pass/fail line, included
    NEXT_TEST = "next_test"        # another test started, line excluded
    BUDGET = "budget"              # capture budget exhausted
    END_OF_INPUT = "end_of_input"  # file ended while capturing
    NOT_FOUND = "not_found"        # start line never seen


@dataclass(frozen=True)
class Segment:
    lines: tuple[str, ...]
    reason: StopReason
    start_line: int | None = None  # 1-based, in the source file
    fallback: bool = False         # start matched without the correlation id

    @classmethod
    def not_found(cls) -> "Segment":
        return cls(lines=(), reason=StopReason.NOT_FOUND)

    @property
    def found(self) -> bool:
        return self.reason is not StopReason.NOT_FOUND

    @property
    def truncated(self) -> bool:
        """True when the budget ran out before any stop condition."""
        return self.reason is StopReason.BUDGET

    def text(self) -> str:
        return "\n".join(self.lines)
