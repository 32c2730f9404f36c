"""Error types raised by gwasenrich."""


class EnrichmentError(Exception):
    """Base class for all gwasenrich errors."""


class InvalidInput(EnrichmentError, ValueError):
    """An argument is empty, malformed or inconsistent with another argument."""


class OutOfRange(EnrichmentError, ValueError):
    """Interval geometry does not fit the chromosome bounds."""


class DependencyFailure(EnrichmentError, RuntimeError):
    """The external interval library or tool failed."""
