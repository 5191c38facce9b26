"""
Input Sanitization Module

Cleans user input and externally fetched data before it is stored.
Strips control characters, collapses whitespace and enforces length limits.
"""

import re
from urllib.parse import urlparse

from constants import MAX_LENGTHS

CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Sanitize single-line text for storage.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Cleaned string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = CONTROL_CHARS_RE.sub('', text)
    text = re.sub(r'\s+', ' ', text).strip()

    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_multiline(text, max_length=MAX_LENGTHS['ingredients']):
    """
    Sanitize a multi-line block (like a recipe's ingredient list).

    Keeps line breaks, cleans each line and drops trailing blank lines.
    """
    if not text:
        return ''

    if not isinstance(text, str):
        text = str(text)

    lines = [sanitize_text(line) for line in text.replace('\r\n', '\n').split('\n')]
    text = '\n'.join(lines).strip('\n')

    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_url(url):
    """
    Validate a URL for storage.

    Returns:
        The URL if it is http(s), empty string otherwise
    """
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        return ''

    return url[:MAX_LENGTHS['recipe_url']]


def sanitize_recipe_name(name, max_length=MAX_LENGTHS['recipe_name']):
    """
    Sanitize a recipe name, falling back to a placeholder when nothing is left.

    Args:
        name: The recipe name to sanitize
        max_length: Maximum allowed length (default 200)
    """
    name = sanitize_text(name, max_length=max_length)
    return name or 'Imported Recipe'


def sanitize_ingredient_text(text, max_length=MAX_LENGTHS['ingredient_text']):
    """Sanitize a single ingredient line from external sources."""
    return sanitize_text(text, max_length=max_length)
