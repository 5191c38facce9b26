"""
Unit Constants

Contains the unit vocabulary recognised by the ingredient line parser
and the fraction characters handled when cleaning ingredient names.
"""

# Unit patterns for ingredient parsing (regex alternatives, matched case-insensitively)
# Order matters: longer forms before their prefixes so "lbs" wins over "lb"
UNIT_PATTERNS = [
    'cups?',
    'tablespoons?',
    'tbsp',
    'teaspoons?',
    'tsp',
    'pounds?',
    'lbs?',
    'ounces?',
    'oz',
    'grams?',
    'g',
    'kilograms?',
    'kg',
    'ml',
    'milliliters?',
    'liters?',
    'l',
    'pieces?',
    'slices?',
    'cloves?',
    'heads?',
    'bunch(?:es)?',
    'stalks?',
    'sprigs?',
    'leaves',
    'cans?',
    'jars?',
    'packages?',
    'box(?:es)?',
    'bags?',
    'pinch(?:es)?',
    'dash(?:es)?',
    'handfuls?',
    'large',
    'medium',
    'small',
]

# Unicode fraction characters that may lead an ingredient name
UNICODE_FRACTIONS = {
    '½': '1/2',
    '⅓': '1/3',
    '⅔': '2/3',
    '¼': '1/4',
    '¾': '3/4',
    '⅛': '1/8',
    '⅜': '3/8',
    '⅝': '5/8',
    '⅞': '7/8',
}
