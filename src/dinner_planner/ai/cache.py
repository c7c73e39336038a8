"""
Dinner Planner - Dish cache.

Generated ingredients/recipe/nutrition are memoized per
(lowercased dish name, language). The cache is shared by couple dishes
and holiday dishes; the generation backend is pluggable.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from dinner_planner.ai.client import generate_text
from dinner_planner.ai.parsing import (
    NUTRITION_FIELDS,
    Failed,
    Generated,
    GeneratedIngredient,
    GenerationResult,
    Nutrition,
    parse_generation,
    parse_ingredients,
)
from dinner_planner.ai.prompts import build_dish_prompt
from dinner_planner.config import Language

logger = logging.getLogger(__name__)

TextGenerator = Callable[[str], Awaitable[str]]


def cache_key(dish_name: str) -> str:
    """Cache key for a dish name: lowercase and trim, nothing else."""
    return dish_name.lower().strip()


@dataclass
class CacheEntry:
    """A memoized generation result."""

    id: str
    dish_name_lower: str
    lang: str
    recipe: str = ""
    nutrition: Nutrition = field(default_factory=Nutrition)
    usage_count: int = 0
    ingredients: list[GeneratedIngredient] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: dict, ingredients_key: str = "dish_cache_ingredients") -> "CacheEntry":
        return cls(
            id=str(record["id"]),
            dish_name_lower=record.get("dish_name_lower") or "",
            lang=record.get("lang") or "",
            recipe=record.get("recipe") or "",
            nutrition=Nutrition.model_validate({name: record.get(name) for name in NUTRITION_FIELDS}),
            usage_count=int(record.get("usage_count") or 0),
            ingredients=parse_ingredients(record.get(ingredients_key)),
        )


class DishCacheStore(Protocol):
    """Storage operations the cache needs."""

    async def get_entry(self, dish_name_lower: str, lang: Language) -> CacheEntry | None: ...

    async def set_usage_count(self, entry_id: str, usage_count: int) -> None: ...

    async def save_entry(
        self, dish_name: str, dish_name_lower: str, lang: Language, generated: Generated
    ) -> None: ...


class DishCacheService:
    """
    Resolve a dish name to generated content, through the cache.

    Never raises for infrastructure problems: lookup, generation and save
    failures are logged and reported as `Failed` (or ignored, for the
    usage counter and the cache write).
    """

    def __init__(self, store: DishCacheStore, generate: TextGenerator | None = None):
        self.store = store
        self.generate = generate or generate_text

    async def lookup_or_generate(self, dish_name: str, lang: Language) -> GenerationResult:
        """
        Return cached content for the dish, generating it on a miss.

        Returns:
            Generated (cached=True on a hit), Rejected for non-food names,
            Failed when nothing usable could be produced
        """
        key = cache_key(dish_name)

        try:
            entry = await self.store.get_entry(key, lang)
        except Exception as e:
            logger.warning(f"Cache lookup failed for '{key}' ({lang}), generating instead: {e}")
            entry = None

        if entry is not None:
            logger.info(f"Cache hit for '{key}' ({lang}), usage_count={entry.usage_count}")
            await self._touch(entry)
            return Generated(
                ingredients=entry.ingredients,
                recipe=entry.recipe,
                nutrition=entry.nutrition,
                cached=True,
            )

        return await self._generate(dish_name, key, lang)

    async def _touch(self, entry: CacheEntry) -> None:
        """Bump the usage counter. Read-then-write; concurrent hits may under-count."""
        try:
            await self.store.set_usage_count(entry.id, entry.usage_count + 1)
        except Exception as e:
            logger.warning(f"Failed to bump usage_count for cache entry {entry.id}: {e}")

    async def _generate(self, dish_name: str, key: str, lang: Language) -> GenerationResult:
        prompt = build_dish_prompt(dish_name, lang)

        try:
            raw = await self.generate(prompt)
        except Exception as e:
            logger.warning(f"Generation failed for '{dish_name}' ({lang}): {e}")
            return Failed(str(e))

        result = parse_generation(raw, lang)

        if isinstance(result, Failed):
            logger.warning(f"Unusable generation for '{dish_name}' ({lang}): {result.reason}")
            return result

        if isinstance(result, Generated):
            try:
                await self.store.save_entry(dish_name, key, lang, result)
            except Exception as e:
                logger.warning(f"Failed to cache generation for '{key}' ({lang}): {e}")

        return result
