"""
BookingDesk Backend — Business Category
=========================================

What:  The closed set of tags a business can be filed under.
Who:   Checked when a business is created and when businesses are listed
       with a `category` filter.

The set is fixed at import time; `Category.is_valid()` is a pure, total
membership test over it.
"""

from enum import Enum
from typing import Any


class Category(str, Enum):
    """Business category tags as they appear on the wire."""

    PETS = "pets"
    AUTOMOTIVE = "auto"
    EVENTS = "events"
    BEAUTY = "beauty"
    HOME = "home"
    HEALTH = "health"

    @classmethod
    def is_valid(cls, tag: Any) -> bool:
        """True when `tag` is exactly one of the enumerated values."""
        return isinstance(tag, str) and tag in cls._value2member_map_

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]
