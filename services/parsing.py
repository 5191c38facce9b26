"""
Parsing Service

Functions for parsing free-text ingredient lines into structured data.
"""

import re
from constants import UNIT_PATTERNS, UNICODE_FRACTIONS

# Quantity - order matters! Mixed fractions first, then simple fractions, then numbers
QUANTITY_RE = re.compile(r'^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)\s*')

# Unit must be followed by whitespace so "g" never eats the start of "garlic"
UNIT_RE = re.compile(r'^(' + '|'.join(UNIT_PATTERNS) + r')\s+', re.IGNORECASE)

NOTES_IN_PARENS_RE = re.compile(r'\s*\(([^)]+)\)\s*$')
NOTES_AFTER_COMMA_RE = re.compile(r',\s*([^,]+)$')

# Leading quantity and optional unit, used when cleaning names from external sources
NAME_PREFIX_RE = re.compile(
    r'^(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)\s*(?:(?:' + '|'.join(UNIT_PATTERNS) + r')\.?\s+)?',
    re.IGNORECASE,
)


def parse_ingredient_line(line):
    """
    Parse an ingredient line into structured components.

    Examples:
    - "2 cups flour" -> quantity "2", unit "cups", name "flour"
    - "1 1/2 cups sugar" -> quantity "1 1/2", unit "cups", name "sugar"
    - "1 lb ground beef, thawed" -> name "ground beef", notes "thawed"
    - "Salt and pepper to taste" -> name only

    Never raises; empty input gives an empty name.
    """
    result = {'name': '', 'quantity': None, 'unit': None, 'notes': None}

    remaining = (line or '').strip()
    if not remaining:
        return result

    qty_match = QUANTITY_RE.match(remaining)
    if qty_match:
        result['quantity'] = qty_match.group(1)
        remaining = remaining[qty_match.end():]

        # A unit is only recognised straight after a quantity
        unit_match = UNIT_RE.match(remaining)
        if unit_match:
            result['unit'] = unit_match.group(1).lower()
            remaining = remaining[unit_match.end():]

    # Parenthetical notes take priority over a trailing comma clause
    parens_match = NOTES_IN_PARENS_RE.search(remaining)
    comma_match = NOTES_AFTER_COMMA_RE.search(remaining)
    if parens_match:
        result['notes'] = parens_match.group(1).strip()
        remaining = remaining[:parens_match.start()]
    elif comma_match:
        result['notes'] = comma_match.group(1).strip()
        remaining = remaining[:comma_match.start()]

    result['name'] = remaining.strip()
    return result


def parse_ingredient_text(text):
    """
    Parse a multi-line ingredient block into ordered structured ingredients.

    Blank lines are skipped; a line that parses to an empty name keeps
    the whole line as its name.
    """
    lines = [line.strip() for line in (text or '').splitlines()]
    lines = [line for line in lines if line]

    structured = []
    for index, line in enumerate(lines):
        parsed = parse_ingredient_line(line)
        structured.append({
            'name': parsed['name'] or line,
            'quantity': parsed['quantity'],
            'unit': parsed['unit'],
            'notes': parsed['notes'],
            'order': index,
        })
    return structured


def strip_units_from_name(name):
    """Remove a leading quantity and unit from an ingredient name ("2 lb chicken" -> "chicken")."""
    if not name:
        return ''

    text = name.strip()
    for char, fraction in UNICODE_FRACTIONS.items():
        # "1½" becomes the mixed number "1 1/2"
        text = text.replace(char, ' ' + fraction)
    text = ' '.join(text.split())

    stripped = NAME_PREFIX_RE.sub('', text, count=1).strip()
    return stripped or name.strip()
