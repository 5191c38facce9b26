"""
Master List Models

Contains the Category and MasterListItem models. The master list holds the
household's recurring purchases: staples bought every week and restock items
added when running low. Items are grouped into named categories.
"""

from .base import db


class Category(db.Model):
    """Named group of master list items (e.g. 'Dairy', 'Cleaning')."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
    items = db.relationship(
        'MasterListItem', backref='category', lazy=True,
        order_by=lambda: [MasterListItem.order, MasterListItem.id]
    )

    def to_dict(self, item_type=None):
        items = [item for item in self.items if item_type is None or item.type == item_type]
        return {
            'id': self.id,
            'name': self.name,
            'order': self.order,
            'items': [item.to_dict() for item in items],
        }


class MasterListItem(db.Model):
    """A staple or restock item."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(20), nullable=False, index=True)  # 'staple' or 'restock'
    # Categories with items cannot be deleted
    category_id = db.Column(db.Integer, db.ForeignKey('category.id', ondelete='RESTRICT'),
                            nullable=False, index=True)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'category_id': self.category_id,
            'order': self.order,
        }
