"""Generation tickets that let late async results be discarded."""

import itertools


class TicketCounter:
    """Issues monotonically increasing tickets; only the newest is current.
    
    The owner checks ``is_current`` before applying the result of an awaited
    operation. ``invalidate`` makes every outstanding ticket stale, which is
    what a reset or a teardown needs.
    """
    
    def __init__(self):
        self._counter = itertools.count(1)
        self._current = 0
    
    def issue(self) -> int:
        self._current = next(self._counter)
        return self._current
    
    def is_current(self, ticket: int) -> bool:
        return ticket == self._current
    
    def invalidate(self) -> None:
        self._current = next(self._counter)
