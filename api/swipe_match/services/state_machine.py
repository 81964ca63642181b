"""Swipe: NonExistent -> Recorded. Match: NoMatch -> Matched.

Both states are terminal. Each transition is performed by exactly one caller,
the one whose atomic store write reported it; every other caller observed a
state someone else already reached.
"""

from ..domain import CreateResult, InsertResult


def is_first_insert(result: InsertResult) -> bool:
    """The caller that moved NonExistent -> Recorded owns the swipe."""
    return result == InsertResult.INSERTED


def is_first_transition(result: CreateResult) -> bool:
    """Only the caller that moved NoMatch -> Matched owns the one-time side effects."""
    return result == CreateResult.CREATED
