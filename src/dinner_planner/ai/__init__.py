"""
Dinner Planner - AI generation.

Cached ingredient/recipe/nutrition generation per dish name, plus
dinner idea suggestions.
"""

from dinner_planner.ai.cache import CacheEntry, DishCacheService, DishCacheStore, cache_key
from dinner_planner.ai.parsing import (
    Failed,
    Generated,
    GeneratedIngredient,
    GenerationResult,
    Nutrition,
    Rejected,
    parse_generation,
    strip_code_fences,
)

__all__ = [
    "CacheEntry",
    "DishCacheService",
    "DishCacheStore",
    "cache_key",
    "Failed",
    "Generated",
    "GeneratedIngredient",
    "GenerationResult",
    "Nutrition",
    "Rejected",
    "parse_generation",
    "strip_code_fences",
]
