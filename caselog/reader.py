"""Log path resolution and snapshot reading of the shared execution log."""

import logging
import os

from caselog.errors import IOUnavailable

logger = logging.getLogger(__name__)


def resolve_log_path(custom_path: str | None, default_path: str) -> str:
    """Return custom_path unless it is None or blank, else default_path."""
    if custom_path is not None and custom_path.strip():
        return custom_path
    return default_path


def read_lines(filepath: str, encoding: str = "utf-8") -> list[str]:
    """Read the whole file once and return its lines without terminators.

    The file is written concurrently by other test threads; the returned list
    is a snapshot and does not see lines appended after the read.

    Raises IOUnavailable if the file is missing or unreadable.
    """
    if not os.path.isfile(filepath):
        raise IOUnavailable(f"Log file not found: {filepath}")
    try:
        with open(filepath, "r", encoding=encoding, errors="replace") as f:
            lines = [line.rstrip("\r\n") for line in f]
    except (OSError, LookupError) as e:
        raise IOUnavailable(f"Failed to read log file {filepath}: {e}") from e

    logger.debug("Read %d lines from %s", len(lines), filepath)
    return lines
