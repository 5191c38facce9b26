"""
AI Service

Narrow interface to the AI provider used for recipe extraction and meal plan
generation. Route handlers only see MealPlanAI; OpenAIMealPlanAI is the real
implementation and tests swap in a fake.
"""

import json
import logging
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup
from openai import OpenAI, OpenAIError

from constants import MEAL_SLOTS
from utils.sanitizer import sanitize_recipe_name, sanitize_ingredient_text
from utils.url_validator import safe_fetch
from .parsing import parse_ingredient_text, strip_units_from_name

logger = logging.getLogger(__name__)

# Maximum page characters sent to the AI for ingredient extraction
EXTRACT_HTML_MAX_LENGTH = 15000

SYSTEM_PROMPT = 'You are a helpful meal planning assistant. Return your response as JSON.'


class AIServiceError(Exception):
    """Raised when the AI provider fails or returns an unusable response."""
    pass


def _is_recipe_type(item):
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    return item_type == 'Recipe' or (isinstance(item_type, list) and 'Recipe' in item_type)


def find_recipe_json_ld(soup):
    """Find schema.org Recipe data in a page's JSON-LD blocks (most recipe sites use this)."""
    for script in soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string or '')
        except (json.JSONDecodeError, TypeError):
            continue

        # Handle a single recipe, an array of items, or an @graph
        if isinstance(data, list):
            candidates = data
        elif isinstance(data, dict) and '@graph' in data:
            candidates = data['@graph']
        else:
            candidates = [data]

        for item in candidates:
            if _is_recipe_type(item):
                return item
    return None


def recipe_from_lines(name, lines):
    """Build an extraction result from a recipe name and raw ingredient lines."""
    lines = [sanitize_ingredient_text(line) for line in lines if line]
    lines = [line for line in lines if line]
    ingredients = '\n'.join(lines)
    return {
        'name': sanitize_recipe_name(name),
        'ingredients': ingredients,
        'structured_ingredients': parse_ingredient_text(ingredients),
    }


def page_text(soup, max_length=EXTRACT_HTML_MAX_LENGTH):
    """Visible text of a page, truncated for the AI prompt."""
    for tag in soup(['script', 'style', 'noscript']):
        tag.decompose()
    text = ' '.join(soup.get_text(separator=' ').split())
    return text[:max_length]


def format_recipes(recipes):
    """One line per recipe for prompts."""
    return '\n'.join(
        f"ID: {r.id}, Name: {r.name}, Protein: {r.protein_type}, Carb: {r.carb_type}, "
        f"Vegetable: {r.vegetable_type}, Prep: {r.prep_time}, Tier: {r.tier}, "
        f"Lunch: {'yes' if r.is_lunch_appropriate else 'no'}"
        for r in recipes
    )


def format_week_plan(week_plan, recipes):
    """Describe the current week for prompts."""
    names = {str(r.id): r.name for r in recipes}
    lines = []
    for day in week_plan:
        slots = ', '.join(
            f"{slot}: {names.get(day[f'{slot}_recipe_id'], 'none')} (ID {day[f'{slot}_recipe_id'] or '-'})"
            for slot in MEAL_SLOTS
        )
        lines.append(f"{day['day']} ({day['date'].isoformat()}): {slots}")
    return '\n'.join(lines)


class MealPlanAI(ABC):
    """Operations the app needs from an AI provider."""

    @abstractmethod
    def extract_recipe_from_text(self, text):
        """Return {name, ingredients, structured_ingredients} from raw recipe text."""

    @abstractmethod
    def generate_week(self, recipes, start_date):
        """Return {days: [7 day assignments], explanation} for a new week."""

    @abstractmethod
    def modify_week(self, instruction, week_plan, recipes):
        """Return {days: [7 day assignments], explanation} applying the instruction."""

    def extract_recipe_from_url(self, url):
        """
        Extract a recipe from a web page.

        Uses the page's JSON-LD Recipe data when present, otherwise hands the
        visible page text to extract_recipe_from_text.

        Raises:
            SSRFError: If the URL fails security validation
            requests.RequestException: For network errors
        """
        response = safe_fetch(url)
        soup = BeautifulSoup(response.text, 'html.parser')

        recipe_data = find_recipe_json_ld(soup)
        if recipe_data:
            raw_ingredients = recipe_data.get('recipeIngredient', [])
            if isinstance(raw_ingredients, str):
                raw_ingredients = [raw_ingredients]
            logger.info("Extracted recipe from JSON-LD at %s", url)
            return recipe_from_lines(recipe_data.get('name'), raw_ingredients)

        text = page_text(soup)
        if not text:
            raise AIServiceError('Page has no readable content')
        return self.extract_recipe_from_text(text)


class OpenAIMealPlanAI(MealPlanAI):
    """MealPlanAI backed by the OpenAI chat completions API in JSON mode."""

    def __init__(self, api_key=None, model='gpt-4o-mini', temperature=0.2, max_tokens=4000, client=None):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise AIServiceError('OPENAI_API_KEY is not configured')
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def _complete_json(self, prompt):
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {'role': 'system', 'content': SYSTEM_PROMPT},
                    {'role': 'user', 'content': prompt},
                ],
                response_format={'type': 'json_object'},
                temperature=self.temperature,
                max_completion_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.warning("OpenAI request failed: %s", e)
            raise AIServiceError(f'AI request failed: {e}') from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise AIServiceError('No response from AI')

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise AIServiceError('AI returned invalid JSON') from e
        if not isinstance(parsed, dict):
            raise AIServiceError('AI returned an unexpected response shape')
        return parsed

    def extract_recipe_from_text(self, text):
        prompt = f"""Extract the recipe from the text below.

Return JSON with:
- "name": the recipe name
- "ingredients": array of ingredient lines exactly as written (e.g. "2 cups flour")
- "structured_ingredients": array of {{"name", "quantity", "unit", "notes"}} for the same lines, using null when absent

Text:
{text}"""
        parsed = self._complete_json(prompt)

        lines = parsed.get('ingredients') or []
        if isinstance(lines, str):
            lines = lines.splitlines()
        if not isinstance(lines, list):
            raise AIServiceError('AI returned an unexpected response shape')
        result = recipe_from_lines(parsed.get('name'), [str(line) for line in lines])

        structured = parsed.get('structured_ingredients')
        if isinstance(structured, list) and structured:
            result['structured_ingredients'] = [
                {
                    'name': strip_units_from_name(str(ing.get('name') or '')),
                    'quantity': ing.get('quantity') or None,
                    'unit': ing.get('unit') or None,
                    'notes': ing.get('notes') or None,
                    'order': index,
                }
                for index, ing in enumerate(structured)
                if isinstance(ing, dict) and ing.get('name')
            ]
        return result

    def generate_week(self, recipes, start_date):
        prompt = f"""Generate a 7-day meal plan starting on Monday {start_date.isoformat()}.

Available recipes:
{format_recipes(recipes)}

Rules:
1. Monday-Thursday: only quick or medium prep recipes
2. Friday-Sunday: any prep time, prefer long prep and new recipes
3. Mostly favorites, 1-2 non-regular, at most 1 new
4. No consecutive days with the same protein type or carb type
5. Lunch slots only use recipes marked Lunch: yes

Return JSON with:
- "days": array of exactly 7 objects in order Monday to Sunday, each with
  "date" (ISO date), "lunch_recipe_id", "protein_recipe_id", "carb_recipe_id", "vegetable_recipe_id"
  (recipe IDs as strings, "" for an empty slot)
- "explanation": brief explanation of the choices"""
        logger.info("Generating meal plan for week of %s from %d recipes", start_date, len(recipes))
        return self._complete_json(prompt)

    def modify_week(self, instruction, week_plan, recipes):
        prompt = f"""Modify the weekly meal plan based on the user's instruction.

Current meal plan:
{format_week_plan(week_plan, recipes)}

Available recipes:
{format_recipes(recipes)}

User instruction: "{instruction}"

Rules:
- Weekdays (Mon-Thu) should be quick/medium prep
- Don't repeat the same protein or carb on consecutive days
- Prefer favorite tier recipes

Return JSON with:
- "days": array of all 7 days, each with "date" (ISO date), "lunch_recipe_id", "protein_recipe_id",
  "carb_recipe_id", "vegetable_recipe_id" (recipe IDs as strings, "" for an empty slot),
  keeping unchanged days as they are
- "explanation": what you changed and why"""
        logger.info("Modifying meal plan: %s", instruction)
        return self._complete_json(prompt)
