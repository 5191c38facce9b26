import logging
import sqlite3

import requests
from flask import Blueprint, Flask, Response, abort, current_app, jsonify, request
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from config import get_config
from constants import (
    DAYS_IN_WEEK, DEFAULT_TIER, MASTER_LIST_TYPES, MAX_LENGTHS, MEAL_SLOTS, SLOT_FIELDS, VALID_TIERS
)
from models import db
from services import (
    AIServiceError, InvalidWeekStart, MealPlannerRepository, OpenAIMealPlanAI,
    aggregate_ingredients, apply_generated_plan_to_week, build_shopping_items,
    collect_ingredients_from_meal_plans, count_selected_meals, create_empty_week_plan,
    filter_recipes_by_slot, format_shopping_list_as_text, get_week_bounds,
    parse_date, parse_ingredient_text, parse_start_date, swap_recipes_in_plan,
    validate_monday, validate_plan_days, week_plan_from_meal_plans,
)
from utils import (
    SSRFError, sanitize_multiline, sanitize_text, sanitize_url
)

logger = logging.getLogger(__name__)

migrate = Migrate()
api = Blueprint('api', __name__, url_prefix='/api')


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # SQLite only enforces ON DELETE CASCADE / SET NULL with foreign keys enabled
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ============================================
# REQUEST HELPERS
# ============================================

def get_repository():
    return MealPlannerRepository(db.session)


def get_ai():
    return current_app.extensions['meal_ai']


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description='Request body must be a JSON object')
    return data


def require_week_start(value, name='start_date'):
    """Parse a required week start and check it is a Monday."""
    if not value:
        abort(400, description=f'{name} is required')
    week_start = parse_date(value)
    validate_monday(week_start)
    return week_start


def int_field(data, key):
    try:
        return int(data[key])
    except KeyError:
        abort(400, description=f'{key} is required')
    except (TypeError, ValueError):
        abort(400, description=f'{key} must be an integer')


def optional_text(value, max_length):
    text = sanitize_text(value, max_length=max_length)
    return text or None


def week_plan_json(week_plan):
    return [dict(day, date=day['date'].isoformat()) for day in week_plan]


def check_recipe_refs(repo, days):
    """Abort with 400 unless every non-empty slot in days names an existing recipe."""
    recipe_ids = set()
    for day in days:
        for field in SLOT_FIELDS.values():
            value = day.get(field)
            if value in (None, ''):
                continue
            try:
                recipe_ids.add(int(value))
            except (TypeError, ValueError):
                abort(400, description=f'Invalid recipe id: {value}')
    missing = repo.missing_recipe_ids(recipe_ids)
    if missing:
        abort(400, description=f"Unknown recipe id(s): {', '.join(str(i) for i in sorted(missing))}")


def recipe_fields(data):
    """Extract and sanitize the recipe fields present in a request body."""
    fields = {}
    if 'name' in data:
        fields['name'] = sanitize_text(data['name'], max_length=MAX_LENGTHS['recipe_name'])
    if 'ingredients' in data:
        fields['ingredients'] = sanitize_multiline(data['ingredients'])
    for key in ('protein_type', 'carb_type', 'vegetable_type', 'prep_time'):
        if key in data:
            fields[key] = optional_text(data[key], 50)
    if 'tier' in data:
        if data['tier'] not in VALID_TIERS:
            abort(400, description=f"tier must be one of {', '.join(sorted(VALID_TIERS))}")
        fields['tier'] = data['tier']
    if 'is_lunch_appropriate' in data:
        fields['is_lunch_appropriate'] = bool(data['is_lunch_appropriate'])
    if 'recipe_url' in data:
        fields['recipe_url'] = sanitize_url(data['recipe_url']) or None
    return fields


def structured_from_payload(items):
    """Validate client-supplied structured ingredients."""
    if not isinstance(items, list):
        abort(400, description='structured_ingredients must be a list')
    structured = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not sanitize_text(item.get('name')):
            abort(400, description='Each structured ingredient needs a name')
        structured.append({
            'name': sanitize_text(item['name'], max_length=MAX_LENGTHS['ingredient_name']),
            'quantity': optional_text(item.get('quantity'), 50),
            'unit': optional_text(item.get('unit'), 20),
            'notes': optional_text(item.get('notes'), MAX_LENGTHS['notes']),
            'order': index,
        })
    return structured


# ============================================
# ROUTES - RECIPES
# ============================================

@api.route('/recipes', methods=['GET'])
def recipes_list():
    repo = get_repository()
    recipes = repo.list_recipes(
        tier=request.args.get('tier'),
        protein_type=request.args.get('protein_type'),
        carb_type=request.args.get('carb_type'),
        prep_time=request.args.get('prep_time'),
    )
    return jsonify([recipe.to_dict(include_ingredients=False) for recipe in recipes])


@api.route('/recipes', methods=['POST'])
def recipe_create():
    data = get_json_body()
    fields = recipe_fields(data)
    if not fields.get('name') or not fields.get('ingredients'):
        abort(400, description='Name and ingredients are required')
    fields.setdefault('tier', DEFAULT_TIER)

    # Parse the free-text block unless the client sent structured ingredients
    if data.get('structured_ingredients'):
        structured = structured_from_payload(data['structured_ingredients'])
    else:
        structured = parse_ingredient_text(fields['ingredients'])

    recipe = get_repository().create_recipe(fields, structured)
    logger.info("Created recipe %s (%d ingredients)", recipe.id, len(structured))
    return jsonify(recipe.to_dict()), 201


@api.route('/recipes/<int:recipe_id>', methods=['GET'])
def recipe_view(recipe_id):
    recipe = get_repository().get_recipe(recipe_id)
    if recipe is None:
        abort(404, description='Recipe not found')
    return jsonify(recipe.to_dict())


@api.route('/recipes/<int:recipe_id>', methods=['PATCH'])
def recipe_update(recipe_id):
    repo = get_repository()
    recipe = repo.get_recipe(recipe_id)
    if recipe is None:
        abort(404, description='Recipe not found')

    data = get_json_body()
    fields = recipe_fields(data)
    if 'name' in fields and not fields['name']:
        abort(400, description='Name cannot be empty')

    structured = None
    if data.get('structured_ingredients'):
        structured = structured_from_payload(data['structured_ingredients'])
    elif fields.get('ingredients'):
        structured = parse_ingredient_text(fields['ingredients'])

    recipe = repo.update_recipe(recipe, fields, structured)
    return jsonify(recipe.to_dict())


@api.route('/recipes/<int:recipe_id>', methods=['DELETE'])
def recipe_delete(recipe_id):
    repo = get_repository()
    recipe = repo.get_recipe(recipe_id)
    if recipe is None:
        abort(404, description='Recipe not found')
    name = recipe.name
    repo.delete_recipe(recipe)
    logger.info("Deleted recipe %s (%s)", recipe_id, name)
    return jsonify({'message': f'Recipe "{name}" deleted'})


@api.route('/recipes/extract', methods=['POST'])
def recipe_extract():
    """Extract a recipe from pasted text or a URL. Nothing is saved."""
    data = get_json_body()
    url = str(data.get('url') or '').strip()
    text = sanitize_multiline(data.get('text'))

    if url:
        safe_url = sanitize_url(url)
        if not safe_url:
            abort(400, description='Invalid URL. Only http and https URLs are allowed.')
        result = get_ai().extract_recipe_from_url(safe_url)
        result['recipe_url'] = safe_url
    elif text:
        result = get_ai().extract_recipe_from_text(text)
    else:
        abort(400, description='Provide either text or url')

    return jsonify(result)


# ============================================
# ROUTES - MEAL PLAN
# ============================================

def week_response(week_start, meal_plans, status=200, **extra):
    _, week_end = get_week_bounds(week_start)
    week_plan = week_plan_from_meal_plans(week_start, meal_plans)
    body = {
        'start_date': week_start.isoformat(),
        'end_date': week_end.date().isoformat(),
        'week_plan': week_plan_json(week_plan),
        'meal_plans': [plan.to_dict() for plan in meal_plans],
        'selected_count': count_selected_meals(week_plan),
    }
    body.update(extra)
    return jsonify(body), status


@api.route('/meal-plan', methods=['GET'])
def meal_plan_view():
    week_start = parse_start_date(request.args.get('start_date'))
    meal_plans = get_repository().get_week(week_start)
    return week_response(week_start, meal_plans)


@api.route('/meal-plan/options', methods=['GET'])
def meal_plan_options():
    """Recipe candidates for each slot of the grid."""
    grouped = filter_recipes_by_slot(get_repository().list_recipes())
    return jsonify({
        slot: [recipe.to_dict(include_ingredients=False) for recipe in grouped[slot]]
        for slot in MEAL_SLOTS
    })


@api.route('/meal-plan', methods=['POST'])
def meal_plan_save():
    data = get_json_body()
    week_start = require_week_start(data.get('start_date'))

    days = data.get('meal_plans')
    if not isinstance(days, list) or len(days) != DAYS_IN_WEEK:
        abort(400, description=f'meal_plans must contain exactly {DAYS_IN_WEEK} days')
    if not all(isinstance(day, dict) for day in days):
        abort(400, description='Each meal plan day must be an object')

    repo = get_repository()
    check_recipe_refs(repo, days)
    meal_plans = repo.replace_week(week_start, days)
    return week_response(week_start, meal_plans, status=201)


@api.route('/meal-plan', methods=['DELETE'])
def meal_plan_delete():
    body = request.get_json(silent=True) or {}
    week_start = require_week_start(request.args.get('start_date') or body.get('start_date'))
    deleted = get_repository().delete_week(week_start)
    return jsonify({'message': 'Meal plan deleted successfully', 'deleted': deleted})


@api.route('/meal-plan/<int:meal_plan_id>', methods=['PATCH'])
def meal_plan_update(meal_plan_id):
    repo = get_repository()
    meal_plan = repo.get_meal_plan(meal_plan_id)
    if meal_plan is None:
        abort(404, description='Meal plan not found')

    data = get_json_body()
    slots = {field: data[field] for field in SLOT_FIELDS.values() if field in data}
    check_recipe_refs(repo, [slots])
    meal_plan = repo.update_meal_plan(meal_plan, slots)
    return jsonify(meal_plan.to_dict())


@api.route('/meal-plan/swap', methods=['POST'])
def meal_plan_swap():
    data = get_json_body()
    week_start = require_week_start(data.get('start_date'))
    from_index = int_field(data, 'from_index')
    to_index = int_field(data, 'to_index')
    if not (0 <= from_index < DAYS_IN_WEEK and 0 <= to_index < DAYS_IN_WEEK):
        abort(400, description=f'Day indexes must be between 0 and {DAYS_IN_WEEK - 1}')

    repo = get_repository()
    week_plan = week_plan_from_meal_plans(week_start, repo.get_week(week_start))
    try:
        swapped = swap_recipes_in_plan(week_plan, data.get('column'), from_index, to_index)
    except ValueError as e:
        abort(400, description=str(e))

    meal_plans = repo.replace_week(week_start, swapped)
    return week_response(week_start, meal_plans)


@api.route('/meal-plan/generate', methods=['POST'])
def meal_plan_generate():
    """Fill a week with an AI-generated plan."""
    data = get_json_body()
    week_start = require_week_start(data.get('start_date'))

    repo = get_repository()
    recipes = repo.list_recipes()
    if not recipes:
        abort(400, description='No recipes available to plan with')

    result = get_ai().generate_week(recipes, week_start)
    days = result.get('days')
    validate_plan_days(days, [recipe.id for recipe in recipes], week_start=week_start)

    week_plan = apply_generated_plan_to_week(create_empty_week_plan(week_start), days)
    meal_plans = repo.replace_week(week_start, week_plan)
    logger.info("Generated meal plan for week of %s", week_start)
    return week_response(week_start, meal_plans, status=201, explanation=result.get('explanation', ''))


@api.route('/meal-plan/modify', methods=['POST'])
def meal_plan_modify():
    """Apply a natural-language change ("swap Tuesday for something faster") via the AI."""
    data = get_json_body()
    week_start = require_week_start(data.get('start_date'))
    instruction = sanitize_text(data.get('instruction'), max_length=MAX_LENGTHS['instruction'])
    if not instruction:
        abort(400, description='instruction is required')

    repo = get_repository()
    current = week_plan_from_meal_plans(week_start, repo.get_week(week_start))
    recipes = repo.list_recipes()

    result = get_ai().modify_week(instruction, current, recipes)
    days = result.get('days')
    validate_plan_days(days, [recipe.id for recipe in recipes], week_start=week_start)

    week_plan = apply_generated_plan_to_week(current, days)
    meal_plans = repo.replace_week(week_start, week_plan)
    return week_response(week_start, meal_plans, explanation=result.get('explanation', ''))


# ============================================
# ROUTES - SHOPPING LIST
# ============================================

def get_week_list_or_404(repo, week_start):
    shopping_list = repo.get_shopping_list(week_start)
    if shopping_list is None:
        abort(404, description='Shopping list not found')
    return shopping_list


@api.route('/shopping-list', methods=['GET'])
def shopping_list_view():
    week_start_param = request.args.get('week_start')
    if not week_start_param:
        abort(400, description='week_start query parameter is required')
    shopping_list = get_repository().get_shopping_list(parse_date(week_start_param))
    return jsonify(shopping_list.to_dict() if shopping_list else None)


@api.route('/shopping-list/generate', methods=['POST'])
def shopping_list_generate():
    """Rebuild the week's meal items from the meal plan. Manual items are kept."""
    data = get_json_body()
    week_start = require_week_start(data.get('week_start'), name='week_start')

    repo = get_repository()
    ingredients = collect_ingredients_from_meal_plans(repo.get_week(week_start))
    aggregated = aggregate_ingredients(ingredients)
    shopping_list = repo.replace_generated_items(week_start, build_shopping_items(aggregated))

    body = shopping_list.to_dict()
    body['aggregated'] = aggregated
    return jsonify(body), 201


@api.route('/shopping-list/export', methods=['GET'])
def shopping_list_export():
    week_start_param = request.args.get('week_start')
    if not week_start_param:
        abort(400, description='week_start query parameter is required')
    shopping_list = get_week_list_or_404(get_repository(), parse_date(week_start_param))
    text = format_shopping_list_as_text([item.to_dict() for item in shopping_list.items])
    return Response(text, mimetype='text/plain')


@api.route('/shopping-list/items', methods=['POST'])
def shopping_item_add():
    data = get_json_body()
    week_start = require_week_start(data.get('week_start'), name='week_start')
    name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['item_name'])
    if not name:
        abort(400, description='Item name is required')

    item = get_repository().add_manual_item(week_start, {
        'name': name,
        'quantity': optional_text(data.get('quantity'), 200),
        'unit': optional_text(data.get('unit'), 20),
        'notes': optional_text(data.get('notes'), MAX_LENGTHS['notes']),
        'checked': bool(data.get('checked', False)),
    })
    return jsonify(item.to_dict()), 201


@api.route('/shopping-list/items/<int:item_id>', methods=['PATCH'])
def shopping_item_update(item_id):
    repo = get_repository()
    item = repo.get_item(item_id)
    if item is None:
        abort(404, description='Item not found')

    data = get_json_body()
    fields = {}
    if 'name' in data:
        fields['name'] = sanitize_text(data['name'], max_length=MAX_LENGTHS['item_name'])
        if not fields['name']:
            abort(400, description='Item name cannot be empty')
    if 'quantity' in data:
        fields['quantity'] = optional_text(data['quantity'], 200)
    if 'unit' in data:
        fields['unit'] = optional_text(data['unit'], 20)
    if 'notes' in data:
        fields['notes'] = optional_text(data['notes'], MAX_LENGTHS['notes'])
    if 'checked' in data:
        fields['checked'] = bool(data['checked'])
    if 'order' in data:
        fields['order'] = int_field(data, 'order')

    item = repo.update_item(item, fields)
    return jsonify(item.to_dict())


@api.route('/shopping-list/items/<int:item_id>', methods=['DELETE'])
def shopping_item_delete(item_id):
    repo = get_repository()
    item = repo.get_item(item_id)
    if item is None:
        abort(404, description='Item not found')
    repo.delete_item(item)
    return jsonify({'success': True})


@api.route('/shopping-list/clear-checked', methods=['POST'])
def shopping_uncheck_all():
    data = get_json_body()
    week_start = require_week_start(data.get('week_start'), name='week_start')
    repo = get_repository()
    shopping_list = repo.uncheck_all(get_week_list_or_404(repo, week_start))
    return jsonify(shopping_list.to_dict())


def master_item_target(repo, data):
    """Resolve the (name, source) an include/exclude request refers to."""
    if data.get('master_item_id') is not None:
        master_item = repo.get_master_item(int_field(data, 'master_item_id'))
        if master_item is None:
            abort(404, description='Master list item not found')
        return master_item.name, master_item.type

    name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['item_name'])
    source = data.get('source')
    if not name:
        abort(400, description='name or master_item_id is required')
    if source not in MASTER_LIST_TYPES:
        abort(400, description=f"source must be one of {', '.join(MASTER_LIST_TYPES)}")
    return name, source


@api.route('/shopping-list/include', methods=['POST'])
def shopping_include_master_item():
    """Add a staple or restock item to the week's list (no duplicates)."""
    data = get_json_body()
    week_start = require_week_start(data.get('week_start'), name='week_start')
    repo = get_repository()
    name, source = master_item_target(repo, data)
    item = repo.include_master_item(week_start, name, source)
    return jsonify(item.to_dict()), 201


@api.route('/shopping-list/exclude', methods=['POST'])
def shopping_exclude_master_item():
    data = get_json_body()
    week_start = require_week_start(data.get('week_start'), name='week_start')
    repo = get_repository()
    name, source = master_item_target(repo, data)
    removed = repo.exclude_master_item(week_start, name, source)
    return jsonify({'success': True, 'removed': removed})


# ============================================
# ROUTES - MASTER LIST
# ============================================

@api.route('/master-list', methods=['GET'])
def master_list_view():
    """Categories with their staple and restock items; ?type= narrows to one kind."""
    item_type = request.args.get('type')
    if item_type and item_type not in MASTER_LIST_TYPES:
        abort(400, description=f"type must be one of {', '.join(MASTER_LIST_TYPES)}")
    categories = get_repository().list_categories()
    return jsonify([category.to_dict(item_type=item_type) for category in categories])


@api.route('/master-list/categories', methods=['POST'])
def category_create():
    data = get_json_body()
    name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['category_name'])
    if not name:
        abort(400, description='Category name is required')

    repo = get_repository()
    if repo.get_category_by_name(name) is not None:
        abort(400, description=f'Category "{name}" already exists')
    category = repo.create_category(name)
    return jsonify(category.to_dict()), 201


@api.route('/master-list/categories/<int:category_id>', methods=['DELETE'])
def category_delete(category_id):
    repo = get_repository()
    category = repo.get_category(category_id)
    if category is None:
        abort(404, description='Category not found')
    try:
        repo.delete_category(category)
    except ValueError as e:
        abort(400, description=str(e))
    return jsonify({'success': True})


@api.route('/master-list/items', methods=['POST'])
def master_item_create():
    data = get_json_body()
    name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['item_name'])
    item_type = data.get('type')
    if not name:
        abort(400, description='Item name is required')
    if item_type not in MASTER_LIST_TYPES:
        abort(400, description=f"type must be one of {', '.join(MASTER_LIST_TYPES)}")

    repo = get_repository()
    category = repo.get_category(int_field(data, 'category_id'))
    if category is None:
        abort(404, description='Category not found')
    item = repo.add_master_item(category, name, item_type)
    return jsonify(item.to_dict()), 201


@api.route('/master-list/items/<int:item_id>', methods=['PATCH'])
def master_item_update(item_id):
    repo = get_repository()
    item = repo.get_master_item(item_id)
    if item is None:
        abort(404, description='Master list item not found')

    data = get_json_body()
    name = sanitize_text(data.get('name'), max_length=MAX_LENGTHS['item_name'])
    if not name:
        abort(400, description='Item name is required')
    item = repo.rename_master_item(item, name)
    return jsonify(item.to_dict())


@api.route('/master-list/items/<int:item_id>', methods=['DELETE'])
def master_item_delete(item_id):
    repo = get_repository()
    item = repo.get_master_item(item_id)
    if item is None:
        abort(404, description='Master list item not found')
    repo.delete_master_item(item)
    return jsonify({'success': True})


# ============================================
# ERROR HANDLERS
# ============================================

def register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(InvalidWeekStart)
    def handle_invalid_week(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(SSRFError)
    def handle_blocked_url(e):
        return jsonify({'error': f'URL blocked for security: {e}'}), 400

    @app.errorhandler(requests.RequestException)
    def handle_fetch_error(e):
        logger.warning("Recipe fetch failed: %s", e)
        return jsonify({'error': f'Could not fetch URL: {e}'}), 500

    @app.errorhandler(AIServiceError)
    def handle_ai_error(e):
        logger.warning("AI request failed: %s", e)
        return jsonify({'error': str(e)}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500


# ============================================
# APPLICATION FACTORY
# ============================================

def create_app(config_name=None, ai=None):
    """
    Create the Flask application.

    Args:
        config_name: 'development', 'production' or 'testing' (default: FLASK_ENV)
        ai: MealPlanAI implementation; defaults to OpenAI using the app config
    """
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)
    migrate.init_app(app, db)

    if ai is None:
        ai = OpenAIMealPlanAI(
            api_key=app.config['OPENAI_API_KEY'],
            model=app.config['OPENAI_MODEL'],
            temperature=app.config['AI_TEMPERATURE'],
            max_tokens=app.config['AI_MAX_TOKENS'],
        )
    app.extensions['meal_ai'] = ai

    app.register_blueprint(api)
    register_error_handlers(app)

    @app.route('/')
    def index():
        return jsonify({'name': 'Meal Planner API', 'status': 'ok'})

    return app


def init_db(app):
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    app = create_app()
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
