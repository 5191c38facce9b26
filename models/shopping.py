"""
Shopping Models

Contains the ShoppingList and ShoppingListItem models. There is one list
per week, keyed by the week's Monday.
"""

from .base import db


class ShoppingList(db.Model):
    """Weekly shopping list."""
    id = db.Column(db.Integer, primary_key=True)
    week_start = db.Column(db.Date, unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
    items = db.relationship(
        'ShoppingListItem', backref='shopping_list', lazy=True,
        cascade='all, delete-orphan',
        order_by=lambda: [ShoppingListItem.order, ShoppingListItem.id]
    )

    def to_dict(self):
        return {
            'id': self.id,
            'week_start': self.week_start.isoformat(),
            'items': [item.to_dict() for item in self.items],
        }


class ShoppingListItem(db.Model):
    """Shopping list item with source tracking."""
    id = db.Column(db.Integer, primary_key=True)
    shopping_list_id = db.Column(db.Integer, db.ForeignKey('shopping_list.id', ondelete='CASCADE'),
                                 nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.String(200), nullable=True)  # e.g. "2 + 2"
    unit = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.String(500), nullable=True)
    checked = db.Column(db.Boolean, nullable=False, default=False)
    # Source tracking: 'meal' (generated from the meal plan), 'manual' (user added),
    # 'staple' or 'restock' (included from the master list)
    source = db.Column(db.String(20), nullable=False, default='meal')
    order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'shopping_list_id': self.shopping_list_id,
            'name': self.name,
            'quantity': self.quantity,
            'unit': self.unit,
            'notes': self.notes,
            'checked': self.checked,
            'source': self.source,
            'order': self.order,
        }
