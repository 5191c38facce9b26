"""
Pytest configuration and shared fixtures.

Every test gets a fresh app on an in-memory SQLite database and a fake AI
provider, so nothing here talks to the network.
"""

import pytest

from app import create_app
from models import db
from services import MealPlanAI, MealPlannerRepository, parse_ingredient_text
from services.ai import recipe_from_lines


class FakeMealPlanAI(MealPlanAI):
    """MealPlanAI that returns canned responses and records its calls."""

    def __init__(self):
        self.days = []
        self.explanation = 'Canned plan'
        self.calls = []

    def extract_recipe_from_text(self, text):
        self.calls.append(('extract', text))
        lines = text.splitlines()
        return recipe_from_lines(lines[0] if lines else '', lines[1:])

    def generate_week(self, recipes, start_date):
        self.calls.append(('generate', start_date))
        return {'days': self.days, 'explanation': self.explanation}

    def modify_week(self, instruction, week_plan, recipes):
        self.calls.append(('modify', instruction))
        return {'days': self.days, 'explanation': self.explanation}


@pytest.fixture
def fake_ai():
    return FakeMealPlanAI()


@pytest.fixture
def app(fake_ai):
    app = create_app('testing', ai=fake_ai)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repo(app):
    return MealPlannerRepository(db.session)


@pytest.fixture
def make_recipe(repo):
    """
    Factory for stored recipes.

    Usage in tests:
        def test_something(make_recipe):
            recipe = make_recipe('Fried Rice', '2 cups rice', carb_type='rice')
    """
    def _make(name, ingredients='1 onion', **fields):
        fields = dict(fields, name=name, ingredients=ingredients)
        return repo.create_recipe(fields, parse_ingredient_text(ingredients))
    return _make

