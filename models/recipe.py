"""
Recipe Models

Contains the Recipe and StructuredIngredient models. A recipe keeps its raw
ingredient text alongside the parsed, ordered structured ingredients.
"""

from constants import DEFAULT_TIER
from .base import db


class Recipe(db.Model):
    """Recipe with classification metadata and structured ingredients."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    ingredients = db.Column(db.Text, nullable=False, default='')  # raw free-text block
    protein_type = db.Column(db.String(50), nullable=True, index=True)
    carb_type = db.Column(db.String(50), nullable=True, index=True)
    vegetable_type = db.Column(db.String(50), nullable=True)
    prep_time = db.Column(db.String(20), nullable=True)  # 'quick', 'medium', 'long'
    tier = db.Column(db.String(20), nullable=False, default=DEFAULT_TIER, index=True)
    is_lunch_appropriate = db.Column(db.Boolean, nullable=False, default=False)
    recipe_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
    structured_ingredients = db.relationship(
        'StructuredIngredient', backref='recipe', lazy=True,
        cascade='all, delete-orphan', order_by='StructuredIngredient.order'
    )

    def to_dict(self, include_ingredients=True):
        data = {
            'id': self.id,
            'name': self.name,
            'ingredients': self.ingredients,
            'protein_type': self.protein_type,
            'carb_type': self.carb_type,
            'vegetable_type': self.vegetable_type,
            'prep_time': self.prep_time,
            'tier': self.tier,
            'is_lunch_appropriate': self.is_lunch_appropriate,
            'recipe_url': self.recipe_url,
        }
        if include_ingredients:
            data['structured_ingredients'] = [ing.to_dict() for ing in self.structured_ingredients]
        return data


class StructuredIngredient(db.Model):
    """One parsed ingredient line belonging to a recipe."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.String(50), nullable=True)  # kept verbatim, e.g. "1 1/2"
    unit = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.String(500), nullable=True)
    order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'quantity': self.quantity,
            'unit': self.unit,
            'notes': self.notes,
            'order': self.order,
        }
