"""
Services Package

Business logic modules for the meal planner.
"""

from .parsing import (
    parse_ingredient_line,
    parse_ingredient_text,
    strip_units_from_name,
)

from .shopping import (
    normalize_ingredient_name,
    aggregate_ingredients,
    collect_ingredients_from_meal_plans,
    build_shopping_items,
    format_shopping_list_as_text,
)

from .dates import (
    InvalidWeekStart,
    get_week_bounds,
    validate_monday,
    parse_start_date,
    parse_date,
    get_monday,
    is_monday,
)

from .ai import (
    AIServiceError,
    MealPlanAI,
    OpenAIMealPlanAI,
)

from .mealplan import (
    create_empty_week_plan,
    swap_recipes_in_plan,
    apply_generated_plan_to_week,
    week_plan_from_meal_plans,
    count_selected_meals,
    filter_recipes_by_slot,
    validate_plan_days,
)

from .repository import MealPlannerRepository

__all__ = [
    # Parsing
    'parse_ingredient_line',
    'parse_ingredient_text',
    'strip_units_from_name',
    # Shopping
    'normalize_ingredient_name',
    'aggregate_ingredients',
    'collect_ingredients_from_meal_plans',
    'build_shopping_items',
    'format_shopping_list_as_text',
    # Dates
    'InvalidWeekStart',
    'get_week_bounds',
    'validate_monday',
    'parse_start_date',
    'parse_date',
    'get_monday',
    'is_monday',
    # AI
    'AIServiceError',
    'MealPlanAI',
    'OpenAIMealPlanAI',
    # Meal plan
    'create_empty_week_plan',
    'swap_recipes_in_plan',
    'apply_generated_plan_to_week',
    'week_plan_from_meal_plans',
    'count_selected_meals',
    'filter_recipes_by_slot',
    'validate_plan_days',
    # Persistence
    'MealPlannerRepository',
]
