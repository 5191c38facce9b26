"""
End-to-end tests for the JSON API.

Requests go through the Flask test client against an in-memory database.
"""

from datetime import date, timedelta

import pytest

WEEK = '2026-02-09'
MONDAY = date(2026, 2, 9)


def days_with(**slots_by_index):
    """Seven empty day payloads; keyword args like d0={'protein_recipe_id': 1} fill a day."""
    days = []
    for index in range(7):
        day = {'lunch_recipe_id': '', 'protein_recipe_id': '', 'carb_recipe_id': '', 'vegetable_recipe_id': ''}
        day.update(slots_by_index.get(f'd{index}', {}))
        days.append(day)
    return days


def generated(recipe_id):
    return [
        {
            'date': (MONDAY + timedelta(days=i)).isoformat(),
            'lunch_recipe_id': '',
            'protein_recipe_id': str(recipe_id),
            'carb_recipe_id': '',
            'vegetable_recipe_id': '',
        }
        for i in range(7)
    ]


# ============================================
# RECIPES
# ============================================

def test_create_recipe_parses_ingredients(client):
    response = client.post('/api/recipes', json={
        'name': 'Chicken Rice',
        'ingredients': '2 cups rice\n1 lb chicken, diced',
        'protein_type': 'chicken',
        'tier': 'favorite',
    })
    assert response.status_code == 201
    data = response.get_json()
    assert data['name'] == 'Chicken Rice'
    assert data['tier'] == 'favorite'
    assert [(i['name'], i['quantity'], i['unit'], i['notes']) for i in data['structured_ingredients']] == [
        ('rice', '2', 'cups', None),
        ('chicken', '1', 'lb', 'diced'),
    ]


def test_create_recipe_uses_supplied_structured_ingredients(client):
    response = client.post('/api/recipes', json={
        'name': 'Toast',
        'ingredients': '2 slices bread',
        'structured_ingredients': [{'name': 'bread', 'quantity': '2', 'unit': 'slices'}],
    })
    data = response.get_json()
    assert data['tier'] == 'regular'
    assert data['structured_ingredients'][0]['name'] == 'bread'
    assert data['structured_ingredients'][0]['order'] == 0


def test_create_recipe_requires_name_and_ingredients(client):
    response = client.post('/api/recipes', json={'name': 'Nothing'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Name and ingredients are required'


def test_create_recipe_rejects_unknown_tier(client):
    response = client.post('/api/recipes', json={'name': 'X', 'ingredients': 'y', 'tier': 'legendary'})
    assert response.status_code == 400


def test_create_recipe_rejects_non_object_body(client):
    response = client.post('/api/recipes', json=['not', 'an', 'object'])
    assert response.status_code == 400


def test_list_recipes_orders_by_tier_then_name(client, make_recipe):
    make_recipe('Zucchini Bake', tier='regular')
    make_recipe('Apple Pie', tier='new')
    make_recipe('Beef Stew', tier='favorite', protein_type='beef')

    names = [r['name'] for r in client.get('/api/recipes').get_json()]
    assert names == ['Beef Stew', 'Zucchini Bake', 'Apple Pie']

    filtered = client.get('/api/recipes?protein_type=beef').get_json()
    assert [r['name'] for r in filtered] == ['Beef Stew']


def test_get_missing_recipe_returns_json_404(client):
    response = client.get('/api/recipes/999')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Recipe not found'}


def test_update_recipe_reparses_new_ingredients(client, make_recipe):
    recipe = make_recipe('Soup', '1 onion')
    response = client.patch(f'/api/recipes/{recipe.id}', json={'ingredients': '3 carrots\n1 l stock'})
    assert response.status_code == 200
    structured = response.get_json()['structured_ingredients']
    assert [(i['name'], i['unit']) for i in structured] == [('carrots', None), ('stock', 'l')]


def test_update_recipe_keeps_ingredients_when_not_sent(client, make_recipe):
    recipe = make_recipe('Soup', '1 onion')
    response = client.patch(f'/api/recipes/{recipe.id}', json={'name': 'Onion Soup'})
    data = response.get_json()
    assert data['name'] == 'Onion Soup'
    assert [i['name'] for i in data['structured_ingredients']] == ['onion']


def test_update_recipe_rejects_empty_name(client, make_recipe):
    recipe = make_recipe('Soup')
    assert client.patch(f'/api/recipes/{recipe.id}', json={'name': '  '}).status_code == 400


def test_delete_recipe_clears_meal_plan_slots(client, make_recipe):
    stew = make_recipe('Stew')
    rice = make_recipe('Rice', '2 cups rice')
    client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(d0={'protein_recipe_id': stew.id, 'carb_recipe_id': rice.id}),
    })
    stew_id = stew.id

    response = client.delete(f'/api/recipes/{stew_id}')
    assert response.status_code == 200

    week = client.get(f'/api/meal-plan?start_date={WEEK}').get_json()
    assert week['week_plan'][0]['protein_recipe_id'] == ''
    assert week['week_plan'][0]['carb_recipe_id'] == str(rice.id)
    assert client.get(f'/api/recipes/{stew_id}').status_code == 404


def test_extract_from_text(client, fake_ai):
    response = client.post('/api/recipes/extract', json={'text': 'Pancakes\n2 cups flour\n2 eggs'})
    assert response.status_code == 200
    data = response.get_json()
    assert data['name'] == 'Pancakes'
    assert [i['name'] for i in data['structured_ingredients']] == ['flour', 'eggs']
    assert fake_ai.calls[0][0] == 'extract'


def test_extract_requires_text_or_url(client):
    assert client.post('/api/recipes/extract', json={}).status_code == 400


def test_extract_rejects_non_http_url(client):
    response = client.post('/api/recipes/extract', json={'url': 'ftp://example.com/recipe'})
    assert response.status_code == 400


def test_extract_blocks_private_urls(client):
    response = client.post('/api/recipes/extract', json={'url': 'http://127.0.0.1/admin'})
    assert response.status_code == 400
    assert 'blocked' in response.get_json()['error']


# ============================================
# MEAL PLAN
# ============================================

def test_get_empty_week(client):
    data = client.get(f'/api/meal-plan?start_date={WEEK}').get_json()
    assert data['start_date'] == WEEK
    assert data['end_date'] == '2026-02-15'
    assert len(data['week_plan']) == 7
    assert data['week_plan'][0]['day'] == 'Monday'
    assert data['selected_count'] == 0
    assert data['meal_plans'] == []


def test_get_week_rejects_bad_date(client):
    response = client.get('/api/meal-plan?start_date=soon')
    assert response.status_code == 400


def test_save_week(client, make_recipe):
    stew = make_recipe('Stew')
    response = client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(d0={'protein_recipe_id': stew.id}, d4={'lunch_recipe_id': str(stew.id)}),
    })
    assert response.status_code == 201
    data = response.get_json()
    assert len(data['meal_plans']) == 7
    assert data['selected_count'] == 2
    assert data['meal_plans'][0]['protein_recipe']['name'] == 'Stew'
    assert data['meal_plans'][4]['day_of_week'] == 'Friday'


def test_save_week_twice_replaces_rows(client, make_recipe):
    stew = make_recipe('Stew')
    client.post('/api/meal-plan', json={'start_date': WEEK, 'meal_plans': days_with(d0={'protein_recipe_id': stew.id})})
    response = client.post('/api/meal-plan', json={'start_date': WEEK, 'meal_plans': days_with()})
    assert response.status_code == 201
    assert response.get_json()['selected_count'] == 0
    assert len(response.get_json()['meal_plans']) == 7


def test_save_week_requires_monday(client):
    response = client.post('/api/meal-plan', json={'start_date': '2026-02-10', 'meal_plans': days_with()})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Start date must be a Monday'


@pytest.mark.parametrize('count', [0, 6, 8])
def test_save_week_requires_seven_days(client, count):
    response = client.post('/api/meal-plan', json={'start_date': WEEK, 'meal_plans': days_with()[:1] * count})
    assert response.status_code == 400


def test_save_week_rejects_unknown_recipe(client):
    response = client.post('/api/meal-plan', json={
        'start_date': WEEK, 'meal_plans': days_with(d2={'carb_recipe_id': 404}),
    })
    assert response.status_code == 400
    assert '404' in response.get_json()['error']


def test_delete_week(client, make_recipe):
    stew = make_recipe('Stew')
    client.post('/api/meal-plan', json={'start_date': WEEK, 'meal_plans': days_with(d0={'protein_recipe_id': stew.id})})

    response = client.delete(f'/api/meal-plan?start_date={WEEK}')
    assert response.status_code == 200
    assert response.get_json()['deleted'] == 7
    assert client.get(f'/api/meal-plan?start_date={WEEK}').get_json()['meal_plans'] == []


def test_delete_week_requires_start_date(client):
    assert client.delete('/api/meal-plan').status_code == 400


def test_update_meal_plan_day(client, make_recipe):
    stew = make_recipe('Stew')
    rice = make_recipe('Rice')
    saved = client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(d0={'protein_recipe_id': stew.id, 'carb_recipe_id': rice.id}),
    }).get_json()
    monday_id = saved['meal_plans'][0]['id']

    # Absent keys keep their value, '' clears
    response = client.patch(f'/api/meal-plan/{monday_id}', json={'carb_recipe_id': '', 'lunch_recipe_id': stew.id})
    assert response.status_code == 200
    data = response.get_json()
    assert data['protein_recipe_id'] == stew.id
    assert data['carb_recipe_id'] is None
    assert data['lunch_recipe_id'] == stew.id


def test_update_missing_meal_plan(client):
    assert client.patch('/api/meal-plan/12345', json={}).status_code == 404


def test_swap_days(client, make_recipe):
    stew = make_recipe('Stew')
    curry = make_recipe('Curry')
    client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(d0={'protein_recipe_id': stew.id}, d2={'protein_recipe_id': curry.id}),
    })

    response = client.post('/api/meal-plan/swap', json={
        'start_date': WEEK, 'column': 'protein', 'from_index': 0, 'to_index': 2,
    })
    assert response.status_code == 200
    week_plan = response.get_json()['week_plan']
    assert week_plan[0]['protein_recipe_id'] == str(curry.id)
    assert week_plan[2]['protein_recipe_id'] == str(stew.id)


def test_swap_rejects_bad_column_and_index(client):
    bad_column = client.post('/api/meal-plan/swap', json={
        'start_date': WEEK, 'column': 'dessert', 'from_index': 0, 'to_index': 1,
    })
    assert bad_column.status_code == 400
    bad_index = client.post('/api/meal-plan/swap', json={
        'start_date': WEEK, 'column': 'lunch', 'from_index': 0, 'to_index': 7,
    })
    assert bad_index.status_code == 400


def test_generate_week(client, make_recipe, fake_ai):
    stew = make_recipe('Stew', tier='favorite')
    fake_ai.days = generated(stew.id)
    fake_ai.explanation = 'Stew all week'

    response = client.post('/api/meal-plan/generate', json={'start_date': WEEK})
    assert response.status_code == 201
    data = response.get_json()
    assert data['explanation'] == 'Stew all week'
    assert data['selected_count'] == 7
    assert all(day['protein_recipe_id'] == str(stew.id) for day in data['week_plan'])


def test_generate_week_rejects_unknown_recipe_ids(client, make_recipe, fake_ai):
    make_recipe('Stew')
    fake_ai.days = generated(999)

    response = client.post('/api/meal-plan/generate', json={'start_date': WEEK})
    assert response.status_code == 500
    assert 'Invalid recipe ID' in response.get_json()['error']
    assert client.get(f'/api/meal-plan?start_date={WEEK}').get_json()['meal_plans'] == []


def test_generate_week_rejects_short_plan(client, make_recipe, fake_ai):
    stew = make_recipe('Stew')
    fake_ai.days = generated(stew.id)[:5]
    assert client.post('/api/meal-plan/generate', json={'start_date': WEEK}).status_code == 500


def test_generate_week_rejects_unparseable_dates(client, make_recipe, fake_ai):
    stew = make_recipe('Stew')
    fake_ai.days = [dict(day, date='garbage') for day in generated(stew.id)]

    response = client.post('/api/meal-plan/generate', json={'start_date': WEEK})
    assert response.status_code == 500
    assert 'invalid date' in response.get_json()['error']


def test_generate_week_for_other_dates_keeps_saved_week(client, make_recipe, fake_ai):
    stew = make_recipe('Stew')
    client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(**{f'd{i}': {'protein_recipe_id': stew.id} for i in range(7)}),
    })
    fake_ai.days = [
        dict(day, date=(MONDAY + timedelta(days=70 + i)).isoformat())
        for i, day in enumerate(generated(stew.id))
    ]

    response = client.post('/api/meal-plan/generate', json={'start_date': WEEK})
    assert response.status_code == 500
    assert client.get(f'/api/meal-plan?start_date={WEEK}').get_json()['selected_count'] == 7


def test_generate_week_needs_recipes(client):
    response = client.post('/api/meal-plan/generate', json={'start_date': WEEK})
    assert response.status_code == 400


def test_modify_week(client, make_recipe, fake_ai):
    stew = make_recipe('Stew')
    curry = make_recipe('Curry')
    client.post('/api/meal-plan', json={
        'start_date': WEEK, 'meal_plans': days_with(d0={'protein_recipe_id': stew.id}),
    })
    fake_ai.days = [{'date': WEEK, 'protein_recipe_id': str(curry.id)}] + generated(stew.id)[1:]

    response = client.post('/api/meal-plan/modify', json={'start_date': WEEK, 'instruction': 'Curry on Monday'})
    assert response.status_code == 200
    assert response.get_json()['week_plan'][0]['protein_recipe_id'] == str(curry.id)
    assert fake_ai.calls[-1] == ('modify', 'Curry on Monday')


def test_modify_week_requires_instruction(client):
    response = client.post('/api/meal-plan/modify', json={'start_date': WEEK})
    assert response.status_code == 400


def test_meal_plan_options(client, make_recipe):
    make_recipe('Soup', is_lunch_appropriate=True, vegetable_type='leek')
    make_recipe('Steak', protein_type='beef')
    data = client.get('/api/meal-plan/options').get_json()
    assert [r['name'] for r in data['lunch']] == ['Soup']
    assert [r['name'] for r in data['protein']] == ['Steak']
    assert data['carb'] == []


# ============================================
# SHOPPING LIST
# ============================================

@pytest.fixture
def planned_week(client, make_recipe):
    a = make_recipe('A', '2 cups rice\n1 onion')
    b = make_recipe('B', '2 cups Rice\nSalt to taste')
    client.post('/api/meal-plan', json={
        'start_date': WEEK,
        'meal_plans': days_with(d0={'carb_recipe_id': a.id}, d1={'carb_recipe_id': b.id}),
    })
    return a, b


def test_generate_shopping_list(client, planned_week):
    response = client.post('/api/shopping-list/generate', json={'week_start': WEEK})
    assert response.status_code == 201
    data = response.get_json()
    items = {item['name'].lower(): item for item in data['items']}
    assert items['rice']['quantity'] == '2 + 2'
    assert items['rice']['unit'] == 'cups'
    assert items['rice']['notes'] == 'From: A, B'
    assert items['salt to taste']['quantity'] is None
    assert all(item['source'] == 'meal' for item in data['items'])
    assert len(data['aggregated']) == 3


def test_regenerate_keeps_manual_items(client, planned_week):
    client.post('/api/shopping-list/generate', json={'week_start': WEEK})
    client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Coffee'})

    data = client.post('/api/shopping-list/generate', json={'week_start': WEEK}).get_json()
    names = [item['name'] for item in data['items']]
    assert names.count('Coffee') == 1
    assert len([item for item in data['items'] if item['source'] == 'meal']) == 3


def test_get_missing_shopping_list_returns_null(client):
    response = client.get(f'/api/shopping-list?week_start={WEEK}')
    assert response.status_code == 200
    assert response.get_json() is None


def test_get_shopping_list_requires_week(client):
    assert client.get('/api/shopping-list').status_code == 400


def test_add_manual_item_creates_list(client):
    response = client.post('/api/shopping-list/items', json={
        'week_start': WEEK, 'name': 'Milk', 'quantity': '1', 'unit': 'l',
    })
    assert response.status_code == 201
    item = response.get_json()
    assert item['source'] == 'manual'
    assert item['checked'] is False

    shopping_list = client.get(f'/api/shopping-list?week_start={WEEK}').get_json()
    assert shopping_list['week_start'] == WEEK
    assert [i['name'] for i in shopping_list['items']] == ['Milk']


def test_add_item_requires_name(client):
    response = client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': ''})
    assert response.status_code == 400


def test_update_and_delete_item(client):
    item = client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Milk'}).get_json()

    response = client.patch(f"/api/shopping-list/items/{item['id']}", json={'checked': True, 'quantity': '2'})
    assert response.status_code == 200
    assert response.get_json()['checked'] is True
    assert response.get_json()['quantity'] == '2'

    assert client.delete(f"/api/shopping-list/items/{item['id']}").status_code == 200
    assert client.delete(f"/api/shopping-list/items/{item['id']}").status_code == 404


def test_clear_checked_unchecks_all_items(client):
    for name in ('Milk', 'Bread'):
        item = client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': name}).get_json()
        client.patch(f"/api/shopping-list/items/{item['id']}", json={'checked': True})

    response = client.post('/api/shopping-list/clear-checked', json={'week_start': WEEK})
    assert response.status_code == 200
    assert all(item['checked'] is False for item in response.get_json()['items'])


def test_clear_checked_without_list(client):
    response = client.post('/api/shopping-list/clear-checked', json={'week_start': WEEK})
    assert response.status_code == 404


def test_export_shopping_list(client, planned_week):
    client.post('/api/shopping-list/generate', json={'week_start': WEEK})
    response = client.get(f'/api/shopping-list/export?week_start={WEEK}')
    assert response.status_code == 200
    assert response.mimetype == 'text/plain'
    lines = response.get_data(as_text=True).splitlines()
    assert '- rice (2 + 2 cups)' in lines
    assert '- onion (1)' in lines


def test_unknown_route_returns_json(client):
    response = client.get('/api/nope')
    assert response.status_code == 404
    assert 'error' in response.get_json()


# ============================================
# MASTER LIST
# ============================================

@pytest.fixture
def dairy(client):
    return client.post('/api/master-list/categories', json={'name': 'Dairy'}).get_json()


def add_master_item(client, category, name, item_type):
    response = client.post('/api/master-list/items', json={
        'category_id': category['id'], 'name': name, 'type': item_type,
    })
    assert response.status_code == 201
    return response.get_json()


def test_master_list_categories_and_items(client, dairy):
    add_master_item(client, dairy, 'Milk', 'staple')
    add_master_item(client, dairy, 'Butter', 'restock')
    add_master_item(client, dairy, 'Yoghurt', 'staple')
    client.post('/api/master-list/categories', json={'name': 'Bakery'})

    data = client.get('/api/master-list').get_json()
    assert [c['name'] for c in data] == ['Dairy', 'Bakery']
    assert [(i['name'], i['order']) for i in data[0]['items']] == [('Milk', 0), ('Butter', 0), ('Yoghurt', 1)]

    staples = client.get('/api/master-list?type=staple').get_json()
    assert [i['name'] for i in staples[0]['items']] == ['Milk', 'Yoghurt']


def test_master_list_rejects_unknown_type(client, dairy):
    assert client.get('/api/master-list?type=weekly').status_code == 400
    response = client.post('/api/master-list/items', json={
        'category_id': dairy['id'], 'name': 'Milk', 'type': 'weekly',
    })
    assert response.status_code == 400


def test_duplicate_category_name(client, dairy):
    response = client.post('/api/master-list/categories', json={'name': 'Dairy'})
    assert response.status_code == 400
    assert 'already exists' in response.get_json()['error']


def test_master_item_needs_existing_category(client):
    response = client.post('/api/master-list/items', json={'category_id': 42, 'name': 'Milk', 'type': 'staple'})
    assert response.status_code == 404


def test_rename_and_delete_master_item(client, dairy):
    item = add_master_item(client, dairy, 'Milk', 'staple')

    response = client.patch(f"/api/master-list/items/{item['id']}", json={'name': 'Oat milk'})
    assert response.status_code == 200
    assert response.get_json()['name'] == 'Oat milk'
    assert client.patch(f"/api/master-list/items/{item['id']}", json={'name': ''}).status_code == 400

    assert client.delete(f"/api/master-list/items/{item['id']}").status_code == 200
    assert client.delete(f"/api/master-list/items/{item['id']}").status_code == 404


def test_category_with_items_cannot_be_deleted(client, dairy):
    item = add_master_item(client, dairy, 'Milk', 'staple')

    response = client.delete(f"/api/master-list/categories/{dairy['id']}")
    assert response.status_code == 400
    assert 'still has items' in response.get_json()['error']

    client.delete(f"/api/master-list/items/{item['id']}")
    assert client.delete(f"/api/master-list/categories/{dairy['id']}").status_code == 200
    assert client.get('/api/master-list').get_json() == []


def test_new_shopping_list_starts_with_staples(client, dairy):
    add_master_item(client, dairy, 'Milk', 'staple')
    add_master_item(client, dairy, 'Butter', 'restock')

    client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Coffee'})

    items = client.get(f'/api/shopping-list?week_start={WEEK}').get_json()['items']
    assert [(i['name'], i['source'], i['order']) for i in items] == [
        ('Milk', 'staple', 0),
        ('Coffee', 'manual', 1),
    ]


def test_include_restock_item_once(client, dairy):
    butter = add_master_item(client, dairy, 'Butter', 'restock')
    client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Coffee'})

    first = client.post('/api/shopping-list/include', json={'week_start': WEEK, 'master_item_id': butter['id']})
    assert first.status_code == 201
    assert first.get_json()['source'] == 'restock'
    assert first.get_json()['order'] == 1

    again = client.post('/api/shopping-list/include', json={'week_start': WEEK, 'name': 'Butter', 'source': 'restock'})
    assert again.get_json()['id'] == first.get_json()['id']

    items = client.get(f'/api/shopping-list?week_start={WEEK}').get_json()['items']
    assert [i['name'] for i in items] == ['Coffee', 'Butter']


def test_include_requires_valid_source_and_monday(client):
    response = client.post('/api/shopping-list/include', json={'week_start': WEEK, 'name': 'Butter', 'source': 'meal'})
    assert response.status_code == 400
    response = client.post('/api/shopping-list/include', json={'week_start': '2026-02-10', 'name': 'Butter', 'source': 'restock'})
    assert response.status_code == 400
    response = client.post('/api/shopping-list/include', json={'week_start': WEEK, 'master_item_id': 42})
    assert response.status_code == 404


def test_exclude_staple(client, dairy):
    add_master_item(client, dairy, 'Milk', 'staple')
    client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Milk'})

    response = client.post('/api/shopping-list/exclude', json={'week_start': WEEK, 'name': 'Milk', 'source': 'staple'})
    assert response.status_code == 200
    assert response.get_json()['removed'] == 1

    items = client.get(f'/api/shopping-list?week_start={WEEK}').get_json()['items']
    assert [(i['name'], i['source']) for i in items] == [('Milk', 'manual')]


def test_regenerate_keeps_master_list_items_before_meal_items(client, planned_week, dairy):
    add_master_item(client, dairy, 'Milk', 'staple')
    butter = add_master_item(client, dairy, 'Butter', 'restock')
    client.post('/api/shopping-list/include', json={'week_start': WEEK, 'master_item_id': butter['id']})
    client.post('/api/shopping-list/items', json={'week_start': WEEK, 'name': 'Coffee'})

    client.post('/api/shopping-list/generate', json={'week_start': WEEK})
    items = client.post('/api/shopping-list/generate', json={'week_start': WEEK}).get_json()['items']

    assert [(i['name'], i['source']) for i in items[:3]] == [
        ('Milk', 'staple'), ('Butter', 'restock'), ('Coffee', 'manual'),
    ]
    assert [i['source'] for i in items[3:]] == ['meal'] * 3
    orders = [i['order'] for i in items]
    assert orders == sorted(orders)
    assert len(set(orders)) == len(orders)
