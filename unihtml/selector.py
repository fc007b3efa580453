"""Selector lookup strategies used by render wait conditions."""
from enum import IntEnum


class ByType(IntEnum):
    """How the browser resolves a wait condition's selector."""

    UNDEFINED = 0
    ID = 1
    QUERY_ALL = 2
    QUERY = 3
    NODE_ID = 4
    JS_PATH = 5
    SEARCH = 6

    @classmethod
    def is_valid(cls, value) -> bool:
        try:
            by = cls(value)
        except ValueError:
            return False
        return cls.ID <= by <= cls.SEARCH
