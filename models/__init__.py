"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .recipe import Recipe, StructuredIngredient
from .mealplan import MealPlan
from .shopping import ShoppingList, ShoppingListItem
from .masterlist import Category, MasterListItem

__all__ = [
    'db',
    'Recipe',
    'StructuredIngredient',
    'MealPlan',
    'ShoppingList',
    'ShoppingListItem',
    'Category',
    'MasterListItem',
]
