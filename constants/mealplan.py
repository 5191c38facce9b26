"""
Meal Plan Constants

Day names and recipe slots for the weekly meal plan grid.
"""

# Indexed by date.weekday() (Monday=0)
DAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']

DAYS_IN_WEEK = 7

# Recipe slots per day, in display order
MEAL_SLOTS = ('lunch', 'protein', 'carb', 'vegetable')

# Slot name -> week plan / model field
SLOT_FIELDS = {slot: f'{slot}_recipe_id' for slot in MEAL_SLOTS}
