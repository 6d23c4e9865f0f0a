"""Output formatters for extracted segments — text, HTML excerpt, JSON."""

import html
import json
from typing import Callable

from caselog.models import Segment

LOGS_UNAVAILABLE = "Logs unavailable"
NOT_FOUND_MESSAGE = "No logs found for this test case"
HTML_PREFIX = "Logs:<br>"


def format_text(segment: Segment) -> str:
    """Return the joined lines, annotated when the budget cut them short."""
    if not segment.found:
        return NOT_FOUND_MESSAGE
    text = segment.text()
    if segment.truncated:
        text += f"\n[truncated after {len(segment.lines)} lines]"
    return text


def format_html(segment: Segment) -> str:
    """Return the excerpt as embedded in the HTML report."""
    return HTML_PREFIX + html.escape(format_text(segment)).replace("\n", "<br>")


def format_json(segment: Segment) -> str:
    return json.dumps({
        "found": segment.found,
        "reason": segment.reason.value,
        "start_line": segment.start_line,
        "fallback": segment.fallback,
        "truncated": segment.truncated,
        "line_count": len(segment.lines),
        "lines": list(segment.lines),
    })


FORMATTERS = {
    "text": format_text,
    "html": format_html,
    "json": format_json,
}


def get_formatter(output_format: str = "text") -> Callable[[Segment], str]:
    """Factory that returns the formatter for the given output format."""
    try:
        return FORMATTERS[output_format]
    except KeyError:
        raise ValueError(
            f"Unknown output format {output_format!r}, expected one of {sorted(FORMATTERS)}"
        ) from None


def format_unavailable(output_format: str = "text") -> str:
    """Placeholder rendered when extraction failed."""
    if output_format == "html":
        return HTML_PREFIX + LOGS_UNAVAILABLE
    if output_format == "json":
        return json.dumps({"found": False, "error": LOGS_UNAVAILABLE})
    return LOGS_UNAVAILABLE
