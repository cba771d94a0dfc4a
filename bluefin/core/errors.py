"""Exceptions raised by the search core.

Hash collisions in the transposition table are deliberately absent from
this list: two positions sharing a 64-bit key silently share one node.
"""


class SearchError(Exception):
    """Base class for failures of a search call."""


class NoResultError(SearchError):
    """The search loop ended before the root acquired any children."""


class InvariantViolation(SearchError):
    """The selection/expansion control flow reached a state it must never reach."""
