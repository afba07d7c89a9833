"""Ordered string enums for severity, effort and risk scales."""

from enum import StrEnum


class OrderedStrEnum(StrEnum):
    """String enum whose members compare by declaration order.

    Values serialize as plain strings, while <, <=, > and >= follow
    the order the members are declared in rather than alphabetical
    string order.
    """

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def _compare(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank - other.rank

    def __lt__(self, other):
        diff = self._compare(other)
        return diff if diff is NotImplemented else diff < 0

    def __le__(self, other):
        diff = self._compare(other)
        return diff if diff is NotImplemented else diff <= 0

    def __gt__(self, other):
        diff = self._compare(other)
        return diff if diff is NotImplemented else diff > 0

    def __ge__(self, other):
        diff = self._compare(other)
        return diff if diff is NotImplemented else diff >= 0
