"""Exception taxonomy for Bragg-edge extraction.

Every failure aborts the whole extraction. Callers branch on the exception
class (or on ``exit_code`` when the result crosses a process boundary), never
on the message text.
"""

from __future__ import annotations


class BraggEdgeError(Exception):
    """Base class for all extraction failures."""

    exit_code = 1


class ConfigurationError(BraggEdgeError, ValueError):
    """Malformed material configuration, or a single-crystal material."""

    exit_code = 2


class NotFoundError(BraggEdgeError, LookupError):
    """Requested (Z, A) is absent among the element-type components."""

    exit_code = 3


class AmbiguousMatchError(BraggEdgeError, LookupError):
    """Requested (Z, A) matched more than one component."""

    exit_code = 4


class CapacityError(BraggEdgeError):
    """Plane count exceeds the caller's reserved output capacity."""

    exit_code = 5


__all__ = [
    "BraggEdgeError",
    "ConfigurationError",
    "NotFoundError",
    "AmbiguousMatchError",
    "CapacityError",
]
