# Utility modules for the Meal Planner
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .sanitizer import (
    sanitize_text, sanitize_multiline, sanitize_url,
    sanitize_recipe_name, sanitize_ingredient_text
)
