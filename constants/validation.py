"""
Validation Constants

Contains whitelist values for validating user input and
ensuring data integrity.
"""

# Valid recipe tiers (whitelist)
VALID_TIERS = {'favorite', 'regular', 'non-regular', 'new'}

DEFAULT_TIER = 'regular'

# Shopping list item sources
SOURCE_MEAL = 'meal'
SOURCE_MANUAL = 'manual'
SOURCE_STAPLE = 'staple'
SOURCE_RESTOCK = 'restock'

# Master list item types; an included item keeps its type as its source
MASTER_LIST_TYPES = (SOURCE_STAPLE, SOURCE_RESTOCK)

# Maximum field lengths
MAX_LENGTHS = {
    'recipe_name': 200,
    'ingredients': 20000,
    'ingredient_name': 200,
    'ingredient_text': 500,
    'item_name': 200,
    'notes': 500,
    'category_name': 100,
    'instruction': 1000,
    'recipe_url': 500,
}
