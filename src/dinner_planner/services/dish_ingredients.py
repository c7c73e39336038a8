"""
Dinner Planner - Dish ingredient resolution.

Fills a freshly created dish with ingredients, recipe and nutrition:

1. Skip entirely when the group turned AI off (preferences.useAI = false)
2. Look up / generate through DishCacheService
3. Rejected names raise ValidationError; other failures leave the dish empty
4. Write recipe/nutrition onto the dish, then insert its ingredient rows
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from dinner_planner.ai.cache import DishCacheService
from dinner_planner.ai.parsing import Failed, Generated, GeneratedIngredient, Nutrition, Rejected
from dinner_planner.config import Language
from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import DishScope
from dinner_planner.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)

AI_DISABLED = "AI_DISABLED"


class ResolutionStatus(str, Enum):
    SKIPPED = "skipped"  # AI turned off for the group
    CACHED = "cached"
    GENERATED = "generated"
    EMPTY = "empty"  # generation failed, dish left without AI content


@dataclass(frozen=True)
class ResolutionOutcome:
    status: ResolutionStatus
    ingredients: list[GeneratedIngredient] = field(default_factory=list)
    recipe: str = ""
    nutrition: Nutrition = field(default_factory=Nutrition)
    reason: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "ingredients": [ing.model_dump() for ing in self.ingredients],
            "recipe": self.recipe,
            "nutrition": self.nutrition.model_dump(),
            "reason": self.reason,
        }


class DishIngredientResolver:
    """Resolve AI content for couple and holiday dishes alike."""

    def __init__(self, repository: PlannerRepository, cache: DishCacheService):
        self.repository = repository
        self.cache = cache

    async def ai_enabled(self, scope: DishScope, group_id: str) -> bool:
        """Only an explicit useAI = false turns generation off."""
        try:
            preferences = await self.repository.get_group_preferences(scope, group_id)
        except PersistenceError as e:
            logger.warning(f"Could not read preferences of {scope.name} group {group_id}, assuming AI on: {e}")
            return True
        return preferences.get("useAI") is not False

    async def resolve(
        self,
        scope: DishScope,
        group_id: str,
        dish_id: str,
        dish_name: str,
        lang: Language,
    ) -> ResolutionOutcome:
        """
        Resolve and store AI content for one dish.

        Raises:
            ValidationError: the backend rejected the name as not food
        """
        if not await self.ai_enabled(scope, group_id):
            logger.info(f"AI disabled for {scope.name} group {group_id}, skipping dish {dish_id} ('{dish_name}')")
            return ResolutionOutcome(ResolutionStatus.SKIPPED, reason=AI_DISABLED)

        result = await self.cache.lookup_or_generate(dish_name, lang)

        if isinstance(result, Rejected):
            logger.info(f"Dish name rejected for {scope.name} dish {dish_id} ('{dish_name}', {lang})")
            raise ValidationError(result.message)

        if isinstance(result, Failed):
            return ResolutionOutcome(ResolutionStatus.EMPTY, reason=result.reason)

        await self._write_through(scope, dish_id, dish_name, result)

        return ResolutionOutcome(
            ResolutionStatus.CACHED if result.cached else ResolutionStatus.GENERATED,
            ingredients=list(result.ingredients),
            recipe=result.recipe,
            nutrition=result.nutrition,
        )

    async def _write_through(
        self,
        scope: DishScope,
        dish_id: str,
        dish_name: str,
        generated: Generated,
    ) -> None:
        fields = generated.nutrition.present_fields()
        if generated.recipe:
            fields["recipe"] = generated.recipe

        if fields:
            try:
                await self.repository.update_dish(scope, dish_id, fields)
            except PersistenceError as e:
                logger.error(f"Failed to write recipe/nutrition to {scope.name} dish {dish_id}, skipping ingredients: {e}")
                return

        if not generated.ingredients:
            return

        try:
            await self.repository.insert_dish_ingredients(scope, dish_id, list(generated.ingredients))
        except PersistenceError as e:
            # Recipe/nutrition stay written; the dish needs its ingredients re-inserted
            logger.error(
                f"ORPHANED {scope.name} dish {dish_id} ('{dish_name}'): "
                f"{len(generated.ingredients)} ingredient rows not inserted: {e}"
            )
            return

        logger.info(f"Inserted {len(generated.ingredients)} ingredients for {scope.name} dish {dish_id} ('{dish_name}')")
