"""Glue for test listeners: fetch a finished test's logs for the report.

Log extraction must never fail the test it reports on, so every
ExtractionError is logged and replaced with a placeholder.
"""

import logging

from caselog.errors import ExtractionError
from caselog.extractor import SegmentExtractor
from caselog.formatter import format_unavailable, get_formatter
from caselog.models import QueryKey

logger = logging.getLogger(__name__)


class LogAttacher:
    def __init__(self, extractor: SegmentExtractor, output_format: str = "html"):
        self._extractor = extractor
        self._format = get_formatter(output_format)
        self._output_format = output_format

    def logs_for(
        self,
        test_name: str,
        correlation_id: str | None = None,
        log_path: str | None = None,
    ) -> str:
        """Return the rendered log excerpt for one test execution.

        ``correlation_id`` is passed explicitly by the caller (e.g. the id of
        the driver the test ran on); ``log_path`` overrides the configured
        default log file.
        """
        key = QueryKey(test_case_name=test_name, correlation_id=correlation_id)
        try:
            segment = self._extractor.extract_file(key, path=log_path)
        except ExtractionError as e:
            logger.warning("Logs unavailable for %r: %s", test_name, e)
            return format_unavailable(self._output_format)

        if not segment.found:
            logger.info("No log segment found for %r (id=%r)", test_name, correlation_id)
        elif segment.truncated:
            logger.info("Log segment for %r truncated at %d lines", test_name, len(segment.lines))
        return self._format(segment)
