"""Tests for caselog/formatter.py"""

import json
import unittest

from caselog.formatter import (
    HTML_PREFIX,
    LOGS_UNAVAILABLE,
    NOT_FOUND_MESSAGE,
    format_html,
    format_json,
    format_text,
    format_unavailable,
    get_formatter,
)
from caselog.models import Segment, StopReason


def _segment(lines=("T started", "T step", "T pass"), reason=StopReason.END_MARKER) -> Segment:
    return Segment(lines=tuple(lines), reason=reason, start_line=4)


class TestFormatText(unittest.TestCase):
    def test_joins_lines(self):
        self.assertEqual(format_text(_segment()), "T started\nT step\nT pass")

    def test_truncated_is_annotated(self):
        text = format_text(_segment(("T started", "T a"), StopReason.BUDGET))
        self.assertEqual(text, "T started\nT a\n[truncated after 2 lines]")

    def test_not_found(self):
        self.assertEqual(format_text(Segment.not_found()), NOT_FOUND_MESSAGE)


class TestFormatHtml(unittest.TestCase):
    def test_newlines_become_breaks(self):
        self.assertEqual(format_html(_segment()), "Logs:<br>T started<br>T step<br>T pass")

    def test_markup_is_escaped(self):
        html = format_html(_segment(("T started", "T <script>", "T pass")))
        self.assertIn("&lt;script&gt;", html)
        self.assertNotIn("<script>", html)


class TestFormatJson(unittest.TestCase):
    def test_fields(self):
        data = json.loads(format_json(_segment(("T started", "T a"), StopReason.BUDGET)))
        self.assertEqual(data["found"], True)
        self.assertEqual(data["reason"], "budget")
        self.assertEqual(data["start_line"], 4)
        self.assertEqual(data["fallback"], False)
        self.assertEqual(data["truncated"], True)
        self.assertEqual(data["line_count"], 2)
        self.assertEqual(data["lines"], ["T started", "T a"])

    def test_not_found(self):
        data = json.loads(format_json(Segment.not_found()))
        self.assertFalse(data["found"])
        self.assertIsNone(data["start_line"])
        self.assertEqual(data["lines"], [])


class TestGetFormatter(unittest.TestCase):
    def test_known_formats(self):
        self.assertIs(get_formatter("text"), format_text)
        self.assertIs(get_formatter("html"), format_html)
        self.assertIs(get_formatter("json"), format_json)

    def test_default_is_text(self):
        self.assertIs(get_formatter(), format_text)

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            get_formatter("xml")


class TestFormatUnavailable(unittest.TestCase):
    def test_text(self):
        self.assertEqual(format_unavailable(), LOGS_UNAVAILABLE)

    def test_html(self):
        self.assertEqual(format_unavailable("html"), HTML_PREFIX + LOGS_UNAVAILABLE)

    def test_json(self):
        data = json.loads(format_unavailable("json"))
        self.assertEqual(data, {"found": False, "error": LOGS_UNAVAILABLE})


if __name__ == "__main__":
    unittest.main()
