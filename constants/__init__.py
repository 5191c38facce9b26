"""
Constants Package

Exports unit vocabularies, meal plan layout and validation whitelists.
"""

from .units import UNIT_PATTERNS, UNICODE_FRACTIONS
from .mealplan import DAY_NAMES, DAYS_IN_WEEK, MEAL_SLOTS, SLOT_FIELDS
from .validation import (
    VALID_TIERS,
    DEFAULT_TIER,
    SOURCE_MEAL,
    SOURCE_MANUAL,
    SOURCE_STAPLE,
    SOURCE_RESTOCK,
    MASTER_LIST_TYPES,
    MAX_LENGTHS,
)

__all__ = [
    'UNIT_PATTERNS',
    'UNICODE_FRACTIONS',
    'DAY_NAMES',
    'DAYS_IN_WEEK',
    'MEAL_SLOTS',
    'SLOT_FIELDS',
    'VALID_TIERS',
    'DEFAULT_TIER',
    'SOURCE_MEAL',
    'SOURCE_MANUAL',
    'SOURCE_STAPLE',
    'SOURCE_RESTOCK',
    'MASTER_LIST_TYPES',
    'MAX_LENGTHS',
]
