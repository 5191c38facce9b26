"""
Repository Service

Persistence access for recipes, meal plans and shopping lists. Handlers build
a MealPlannerRepository from the request's session and pass it around instead
of querying models directly.

Replace operations (structured ingredients, a week's meal plans, generated
shopping items) delete and recreate children inside one transaction.
"""

import logging
from contextlib import contextmanager
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from constants import DAY_NAMES, DAYS_IN_WEEK, MEAL_SLOTS, SLOT_FIELDS, SOURCE_MANUAL, SOURCE_MEAL, SOURCE_STAPLE
from models import (
    Category, MasterListItem, MealPlan, Recipe, ShoppingList, ShoppingListItem, StructuredIngredient
)
from .dates import get_week_bounds

logger = logging.getLogger(__name__)

RECIPE_FIELDS = (
    'name', 'ingredients', 'protein_type', 'carb_type', 'vegetable_type',
    'prep_time', 'tier', 'is_lunch_appropriate', 'recipe_url',
)

ITEM_FIELDS = ('name', 'quantity', 'unit', 'notes', 'checked', 'order')

# Tier display order: favorites first
TIER_ORDER = {'favorite': 0, 'regular': 1, 'non-regular': 2, 'new': 3}


def _to_recipe_id(value):
    if value is None or value == '':
        return None
    return int(value)


class MealPlannerRepository:
    """Data access for the meal planner, bound to one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    @contextmanager
    def transaction(self):
        """Commit on success, roll back and re-raise on any error."""
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # ============================================
    # RECIPES
    # ============================================

    def list_recipes(self, tier=None, protein_type=None, carb_type=None, prep_time=None):
        query = self.session.query(Recipe)
        if tier:
            query = query.filter(Recipe.tier == tier)
        if protein_type:
            query = query.filter(Recipe.protein_type == protein_type)
        if carb_type:
            query = query.filter(Recipe.carb_type == carb_type)
        if prep_time:
            query = query.filter(Recipe.prep_time == prep_time)
        recipes = query.order_by(Recipe.name).all()
        return sorted(recipes, key=lambda r: TIER_ORDER.get(r.tier, len(TIER_ORDER)))

    def get_recipe(self, recipe_id):
        return self.session.get(Recipe, recipe_id)

    def missing_recipe_ids(self, recipe_ids):
        """Return the ids from recipe_ids that have no recipe."""
        wanted = {int(rid) for rid in recipe_ids}
        if not wanted:
            return set()
        found = {rid for (rid,) in self.session.query(Recipe.id).filter(Recipe.id.in_(wanted))}
        return wanted - found

    def create_recipe(self, fields, structured_ingredients):
        with self.transaction():
            recipe = Recipe(**{k: v for k, v in fields.items() if k in RECIPE_FIELDS})
            recipe.structured_ingredients = [StructuredIngredient(**ing) for ing in structured_ingredients]
            self.session.add(recipe)
        return recipe

    def update_recipe(self, recipe, fields, structured_ingredients=None):
        """Update recipe fields; a structured ingredient list replaces the existing one wholesale."""
        with self.transaction():
            for key, value in fields.items():
                if key in RECIPE_FIELDS:
                    setattr(recipe, key, value)
            if structured_ingredients is not None:
                self._replace_structured_ingredients(recipe, structured_ingredients)
        return recipe

    def replace_structured_ingredients(self, recipe, structured_ingredients):
        with self.transaction():
            self._replace_structured_ingredients(recipe, structured_ingredients)
        return recipe

    def _replace_structured_ingredients(self, recipe, structured_ingredients):
        # delete-orphan cascade removes the old rows on flush
        recipe.structured_ingredients = [StructuredIngredient(**ing) for ing in structured_ingredients]

    def delete_recipe(self, recipe):
        with self.transaction():
            # Clear meal plan slots referencing this recipe
            for field in SLOT_FIELDS.values():
                column = getattr(MealPlan, field)
                self.session.query(MealPlan).filter(column == recipe.id).update(
                    {field: None}, synchronize_session=False
                )
            self.session.delete(recipe)

    # ============================================
    # MEAL PLANS
    # ============================================

    def get_week(self, start_date):
        """Meal plan rows for the week starting at start_date, with recipes and ingredients loaded."""
        start, end = get_week_bounds(start_date)
        options = [
            selectinload(getattr(MealPlan, f"{slot}_recipe")).selectinload(Recipe.structured_ingredients)
            for slot in MEAL_SLOTS
        ]
        return (
            self.session.query(MealPlan)
            .options(*options)
            .filter(MealPlan.date >= start.date(), MealPlan.date <= end.date())
            .order_by(MealPlan.date)
            .all()
        )

    def get_meal_plan(self, meal_plan_id):
        return self.session.get(MealPlan, meal_plan_id)

    def _week_rows(self, start_date):
        start, end = get_week_bounds(start_date)
        return (
            self.session.query(MealPlan)
            .filter(MealPlan.date >= start.date(), MealPlan.date <= end.date())
            .all()
        )

    def replace_week(self, start_date, week_plan):
        """
        Replace the 7 meal plan rows of a week.

        week_plan is a list of day dicts (see services.mealplan); entries are
        assigned to consecutive dates from start_date in order.
        """
        start, _ = get_week_bounds(start_date)
        with self.transaction():
            for plan in self._week_rows(start_date):
                self.session.delete(plan)
            self.session.flush()

            for index, day in enumerate(week_plan[:DAYS_IN_WEEK]):
                day_date = start.date() + timedelta(days=index)
                plan = MealPlan(date=day_date, day_of_week=DAY_NAMES[day_date.weekday()])
                for field in SLOT_FIELDS.values():
                    setattr(plan, field, _to_recipe_id(day.get(field)))
                self.session.add(plan)
        return self.get_week(start_date)

    def delete_week(self, start_date):
        with self.transaction():
            rows = self._week_rows(start_date)
            for plan in rows:
                self.session.delete(plan)
        return len(rows)

    def update_meal_plan(self, meal_plan, slots):
        """Set the given slot fields; values of '' or None clear a slot."""
        with self.transaction():
            for field, value in slots.items():
                if field in SLOT_FIELDS.values():
                    setattr(meal_plan, field, _to_recipe_id(value))
        return meal_plan

    # ============================================
    # SHOPPING LISTS
    # ============================================

    def get_shopping_list(self, week_start):
        return self.session.query(ShoppingList).filter_by(week_start=week_start).first()

    def _get_or_create_shopping_list(self, week_start):
        """Get the week's list, creating it pre-filled with the master list staples."""
        shopping_list = self.get_shopping_list(week_start)
        if shopping_list is None:
            staples = (
                self.session.query(MasterListItem)
                .filter_by(type=SOURCE_STAPLE)
                .order_by(MasterListItem.order, MasterListItem.id)
                .all()
            )
            shopping_list = ShoppingList(week_start=week_start)
            shopping_list.items = [
                ShoppingListItem(name=staple.name, checked=False, source=SOURCE_STAPLE, order=index)
                for index, staple in enumerate(staples)
            ]
            self.session.add(shopping_list)
            self.session.flush()
        return shopping_list

    def _next_order(self, shopping_list):
        return max((item.order for item in shopping_list.items), default=-1) + 1

    def replace_generated_items(self, week_start, items):
        """
        Replace a week's meal-generated items.

        Manual, staple and restock items are kept; the new meal items are
        ordered after them. Creates the week's shopping list if needed.
        """
        with self.transaction():
            shopping_list = self._get_or_create_shopping_list(week_start)
            kept = [item for item in shopping_list.items if item.source != SOURCE_MEAL]
            offset = max((item.order for item in kept), default=-1) + 1
            generated = [
                ShoppingListItem(**dict(fields, order=offset + index))
                for index, fields in enumerate(items)
            ]
            shopping_list.items = kept + generated
            shopping_list.updated_at = func.now()
        logger.info("Shopping list for %s: %d generated items, %d other items kept",
                    week_start, len(items), len(kept))
        return shopping_list

    def add_manual_item(self, week_start, fields):
        with self.transaction():
            shopping_list = self._get_or_create_shopping_list(week_start)
            item = ShoppingListItem(
                name=fields['name'],
                quantity=fields.get('quantity') or None,
                unit=fields.get('unit') or None,
                notes=fields.get('notes') or None,
                checked=bool(fields.get('checked', False)),
                source=SOURCE_MANUAL,
                order=self._next_order(shopping_list),
            )
            shopping_list.items.append(item)
        return item

    def include_master_item(self, week_start, name, source):
        """
        Put a staple or restock item on the week's list.

        An item with the same name and source already on the list is returned
        unchanged, so including twice adds it once.
        """
        with self.transaction():
            shopping_list = self._get_or_create_shopping_list(week_start)
            for item in shopping_list.items:
                if item.name == name and item.source == source:
                    return item
            item = ShoppingListItem(
                name=name, checked=False, source=source, order=self._next_order(shopping_list)
            )
            shopping_list.items.append(item)
        return item

    def exclude_master_item(self, week_start, name, source):
        """Remove every item with this name and source from the week's list; returns the count."""
        with self.transaction():
            shopping_list = self._get_or_create_shopping_list(week_start)
            removed = [item for item in shopping_list.items if item.name == name and item.source == source]
            for item in removed:
                shopping_list.items.remove(item)
        return len(removed)

    def get_item(self, item_id):
        return self.session.get(ShoppingListItem, item_id)

    def update_item(self, item, fields):
        with self.transaction():
            for key, value in fields.items():
                if key in ITEM_FIELDS:
                    setattr(item, key, value)
        return item

    def delete_item(self, item):
        with self.transaction():
            self.session.delete(item)

    def uncheck_all(self, shopping_list):
        """Uncheck every item (move back to the main list)."""
        with self.transaction():
            for item in shopping_list.items:
                item.checked = False
        return shopping_list

    # ============================================
    # MASTER LIST
    # ============================================

    def list_categories(self):
        return self.session.query(Category).order_by(Category.order, Category.name).all()

    def get_category(self, category_id):
        return self.session.get(Category, category_id)

    def get_category_by_name(self, name):
        return self.session.query(Category).filter_by(name=name).first()

    def create_category(self, name):
        with self.transaction():
            last = self.session.query(func.max(Category.order)).scalar()
            category = Category(name=name, order=(last if last is not None else -1) + 1)
            self.session.add(category)
        return category

    def delete_category(self, category):
        """Delete an empty category. Raises ValueError while it still has items."""
        if category.items:
            raise ValueError(f'Category "{category.name}" still has items')
        with self.transaction():
            self.session.delete(category)

    def add_master_item(self, category, name, item_type):
        """Append an item to the end of its category for its type."""
        with self.transaction():
            last = (
                self.session.query(func.max(MasterListItem.order))
                .filter_by(category_id=category.id, type=item_type)
                .scalar()
            )
            item = MasterListItem(
                name=name, type=item_type, category_id=category.id,
                order=(last if last is not None else -1) + 1,
            )
            self.session.add(item)
        return item

    def get_master_item(self, item_id):
        return self.session.get(MasterListItem, item_id)

    def rename_master_item(self, item, name):
        with self.transaction():
            item.name = name
        return item

    def delete_master_item(self, item):
        with self.transaction():
            self.session.delete(item)
