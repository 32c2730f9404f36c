"""Interval backends: merge and overlap queries delegated to interval libraries."""

from gwasenrich.backends.base import IntervalBackend
from gwasenrich.backends.bioframe_backend import BioframeBackend
from gwasenrich.exceptions import InvalidInput


def get_backend(name: str = "bioframe", **kwargs) -> IntervalBackend:
    """
    Get an interval backend by name.

    Args:
        name: Backend name (bioframe, bedtools)
        **kwargs: Passed to the backend constructor

    Returns:
        Backend instance
    """
    if name == "bioframe":
        return BioframeBackend(**kwargs)
    if name == "bedtools":
        from gwasenrich.backends.bedtools import BedtoolsBackend

        return BedtoolsBackend(**kwargs)
    raise InvalidInput(f"Unknown interval backend: {name}. Available: ['bioframe', 'bedtools']")


__all__ = [
    "IntervalBackend",
    "BioframeBackend",
    "get_backend",
]
