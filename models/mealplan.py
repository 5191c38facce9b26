"""
Meal Plan Model

Contains the MealPlan model: one calendar day of the weekly grid with
lunch, protein, carb and vegetable recipe slots.
"""

from constants import MEAL_SLOTS
from .base import db


def _recipe_fk():
    # Deleting a recipe clears the slots that reference it
    return db.ForeignKey('recipe.id', ondelete='SET NULL')


class MealPlan(db.Model):
    """A single day's recipe assignments. A week is 7 rows from a Monday."""
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, unique=True, nullable=False, index=True)
    day_of_week = db.Column(db.String(10), nullable=False)  # 'Monday'...'Sunday'
    lunch_recipe_id = db.Column(db.Integer, _recipe_fk(), nullable=True, index=True)
    protein_recipe_id = db.Column(db.Integer, _recipe_fk(), nullable=True, index=True)
    carb_recipe_id = db.Column(db.Integer, _recipe_fk(), nullable=True, index=True)
    vegetable_recipe_id = db.Column(db.Integer, _recipe_fk(), nullable=True, index=True)
    lunch_recipe = db.relationship('Recipe', foreign_keys=[lunch_recipe_id])
    protein_recipe = db.relationship('Recipe', foreign_keys=[protein_recipe_id])
    carb_recipe = db.relationship('Recipe', foreign_keys=[carb_recipe_id])
    vegetable_recipe = db.relationship('Recipe', foreign_keys=[vegetable_recipe_id])

    def to_dict(self):
        data = {
            'id': self.id,
            'date': self.date.isoformat(),
            'day_of_week': self.day_of_week,
        }
        for slot in MEAL_SLOTS:
            recipe = getattr(self, f'{slot}_recipe')
            data[f'{slot}_recipe_id'] = getattr(self, f'{slot}_recipe_id')
            data[f'{slot}_recipe'] = recipe.to_dict(include_ingredients=False) if recipe else None
        return data
