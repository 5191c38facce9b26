"""
Shopping List Service

Functions for aggregating recipe ingredients into a weekly shopping list.
"""

from constants import MEAL_SLOTS, SOURCE_MEAL


def normalize_ingredient_name(name):
    """Normalize an ingredient name for grouping: lowercase, trimmed, single-spaced."""
    return ' '.join((name or '').lower().split())


def _has_quantity(quantity):
    return quantity is not None and str(quantity).strip() != ''


def aggregate_ingredients(ingredients):
    """
    Aggregate ingredients from multiple recipes into one entry per name.

    Each input is a dict with name, quantity, unit and recipe_name.
    Quantities are never added up: when every occurrence shares one unit
    they are joined with " + " ("2 + 2"), otherwise left uncombined.

    Returns a new list of dicts sorted by display name.
    """
    grouped = {}

    for ing in ingredients:
        key = normalize_ingredient_name(ing.get('name'))
        if key not in grouped:
            grouped[key] = {'name': ing.get('name'), 'quantities': []}
        grouped[key]['quantities'].append({
            'quantity': ing.get('quantity'),
            'unit': ing.get('unit'),
            'recipe_name': ing.get('recipe_name'),
        })

    aggregated = []
    for group in grouped.values():
        quantities = group['quantities']

        # None stands for "no unit"
        units = {q['unit'].lower() if q['unit'] else None for q in quantities}
        present = [str(q['quantity']).strip() for q in quantities if _has_quantity(q['quantity'])]

        combined_quantity = None
        combined_unit = None
        if len(units) == 1 and present:
            combined_quantity = ' + '.join(present)
            combined_unit = next(iter(units))

        sources = []
        for q in quantities:
            if q['recipe_name'] not in sources:
                sources.append(q['recipe_name'])

        aggregated.append({
            'name': group['name'],
            'quantities': [dict(q) for q in quantities],
            'combined_quantity': combined_quantity,
            'combined_unit': combined_unit,
            'notes': 'From: ' + ', '.join(str(s) for s in sources),
        })

    aggregated.sort(key=lambda item: (item['name'].casefold(), item['name']))
    return aggregated


def collect_ingredients_from_meal_plans(meal_plans):
    """
    Flatten the structured ingredients of every filled slot into aggregator input.

    A recipe used in several slots or on several days contributes once per use.
    """
    collected = []
    for plan in meal_plans:
        for slot in MEAL_SLOTS:
            recipe = getattr(plan, f'{slot}_recipe', None)
            if recipe is None:
                continue
            for ing in recipe.structured_ingredients:
                collected.append({
                    'name': ing.name,
                    'quantity': ing.quantity,
                    'unit': ing.unit,
                    'recipe_name': recipe.name,
                })
    return collected


def build_shopping_items(aggregated):
    """Map aggregated ingredients to shopping list item fields."""
    return [
        {
            'name': item['name'],
            'quantity': item['combined_quantity'],
            'unit': item['combined_unit'],
            'notes': item['notes'],
            'checked': False,
            'source': SOURCE_MEAL,
            'order': index,
        }
        for index, item in enumerate(aggregated)
    ]


def format_shopping_list_as_text(items):
    """Format unchecked shopping list items as plain text for export."""
    lines = []
    for item in items:
        if item.get('checked'):
            continue
        line = f"- {item['name']}"
        if item.get('quantity'):
            amount = ' '.join(part for part in (item['quantity'], item.get('unit')) if part)
            line += f" ({amount})"
        lines.append(line)
    return '\n'.join(lines)
