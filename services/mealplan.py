"""
Meal Plan Service

Pure helpers for the weekly meal plan grid. A week plan is a list of
seven day dicts; empty slots hold ''. Nothing here mutates its inputs.
"""

from datetime import timedelta

from constants import DAY_NAMES, DAYS_IN_WEEK, MEAL_SLOTS, SLOT_FIELDS
from .ai import AIServiceError
from .dates import InvalidWeekStart, parse_date


def _empty_day(day_date):
    day = {
        'day': DAY_NAMES[day_date.weekday()],
        'date': day_date,
    }
    for field in SLOT_FIELDS.values():
        day[field] = ''
    return day


def _slot_field(column):
    try:
        return SLOT_FIELDS[column]
    except KeyError:
        raise ValueError(f"Invalid column: {column}. Expected one of {', '.join(MEAL_SLOTS)}")


def create_empty_week_plan(start_date):
    """Create 7 consecutive days from start_date with every slot empty."""
    start = parse_date(start_date)
    return [_empty_day(start + timedelta(days=i)) for i in range(DAYS_IN_WEEK)]


def swap_recipes_in_plan(week_plan, column, from_index, to_index):
    """Return a new plan with one column's recipes exchanged between two days."""
    field = _slot_field(column)
    result = [dict(day) for day in week_plan]
    result[from_index][field], result[to_index][field] = (
        week_plan[to_index][field],
        week_plan[from_index][field],
    )
    return result


def apply_generated_plan_to_week(week_plan, modifications):
    """
    Merge AI-generated day assignments into a week plan.

    A modification matches a day by calendar date (time of day ignored) and
    overwrites all four slots; slots it leaves out become ''.
    """
    by_date = {}
    for mod in modifications:
        by_date[parse_date(mod['date'])] = mod

    result = []
    for day in week_plan:
        updated = dict(day)
        mod = by_date.get(parse_date(day['date']))
        if mod is not None:
            for field in SLOT_FIELDS.values():
                updated[field] = mod.get(field) or ''
        result.append(updated)
    return result


def week_plan_from_meal_plans(start_date, meal_plans):
    """Build a week plan from stored MealPlan rows, leaving missing days empty."""
    rows = {plan.date: plan for plan in meal_plans}
    week_plan = []
    for day in create_empty_week_plan(start_date):
        plan = rows.get(day['date'])
        if plan is not None:
            day['meal_plan_id'] = plan.id
            for field in SLOT_FIELDS.values():
                value = getattr(plan, field)
                day[field] = str(value) if value is not None else ''
        week_plan.append(day)
    return week_plan


def count_selected_meals(week_plan):
    """Count filled recipe slots across the week."""
    return sum(1 for day in week_plan for field in SLOT_FIELDS.values() if day.get(field))


def filter_recipes_by_slot(recipes):
    """Group recipes into candidates for each meal slot."""
    return {
        'lunch': [r for r in recipes if r.is_lunch_appropriate],
        'protein': [r for r in recipes if r.protein_type],
        'carb': [r for r in recipes if r.carb_type],
        'vegetable': [r for r in recipes if r.vegetable_type],
    }


def validate_plan_days(days, recipe_ids, week_start=None, expected=DAYS_IN_WEEK):
    """
    Check an AI-returned plan: exact day count, parseable dates and only known recipe ids.

    With week_start given, the returned dates must be exactly the seven days
    of that week, so a plan for another week can never blank this one.

    Raises AIServiceError when the response cannot be accepted.
    """
    if not isinstance(days, list) or len(days) != expected:
        count = len(days) if isinstance(days, list) else 0
        raise AIServiceError(f'AI returned {count} days, expected {expected}')

    known = {str(recipe_id) for recipe_id in recipe_ids}
    returned_dates = set()
    for day in days:
        if not isinstance(day, dict) or 'date' not in day:
            raise AIServiceError('AI returned a day without a date')
        try:
            returned_dates.add(parse_date(day['date']))
        except InvalidWeekStart as e:
            raise AIServiceError(f"AI returned an invalid date: {day['date']}") from e
        for field in SLOT_FIELDS.values():
            value = day.get(field)
            if value and str(value) not in known:
                raise AIServiceError(f'Invalid recipe ID returned: {value}')

    if week_start is not None:
        week_dates = {day['date'] for day in create_empty_week_plan(week_start)}
        if returned_dates != week_dates:
            raise AIServiceError('AI returned dates outside the requested week')
