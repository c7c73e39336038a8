"""
Dinner Planner - Shopping list engine.

Normalizes ingredient names, merges ingredient lines across dishes and
manual entries, and sorts the result into shopping list sections.
"""

from dinner_planner.shopping.aggregator import aggregate, is_selected
from dinner_planner.shopping.categories import categorize, group_by_category
from dinner_planner.shopping.models import (
    AggregatedIngredient,
    CategorizedIngredient,
    Dish,
    DishStatus,
    IngredientCategory,
    IngredientOccurrence,
    ManualIngredient,
)

__all__ = [
    "aggregate",
    "is_selected",
    "categorize",
    "group_by_category",
    "AggregatedIngredient",
    "CategorizedIngredient",
    "Dish",
    "DishStatus",
    "IngredientCategory",
    "IngredientOccurrence",
    "ManualIngredient",
]
