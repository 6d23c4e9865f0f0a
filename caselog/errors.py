"""Exceptions raised while extracting a test case's log segment."""


class ExtractionError(Exception):
    """Base class for every recoverable extraction failure."""


class IOUnavailable(ExtractionError):
    """Raised when the source log file is missing or cannot be read."""


class InvalidQuery(ExtractionError):
    """Raised when the test case name is missing or blank."""


class InvalidConfiguration(ExtractionError):
    """Raised for a non-positive capture budget or an empty marker."""
