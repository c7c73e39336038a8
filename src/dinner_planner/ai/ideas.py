"""Dinner idea suggestions from a user's food preferences."""

import logging

from pydantic import BaseModel, Field

from dinner_planner.ai.client import call_llm
from dinner_planner.ai.prompts import build_ideas_prompt
from dinner_planner.config import Language
from dinner_planner.errors import GenerationError

logger = logging.getLogger(__name__)

IDEAS_COUNT = 4


class DinnerIdeas(BaseModel):
    """Structured response: a list of dish names."""

    ideas: list[str] = Field(default_factory=list, description="Dish names")


async def generate_ideas(preferences: dict | None, lang: Language) -> list[str]:
    """
    Suggest dinner ideas. Returns an empty list when generation fails.

    Args:
        preferences: User preferences (sides, proteins, veggies, treats, cuisines)
        lang: Output language
    """
    prompt = build_ideas_prompt(preferences or {}, lang)

    try:
        result = await call_llm(
            response_model=DinnerIdeas,
            system_prompt=prompt,
            user_prompt=f"Suggest {IDEAS_COUNT} dinner ideas.",
        )
    except GenerationError as e:
        logger.warning(f"Idea generation failed: {e}")
        return []

    ideas = [idea.strip() for idea in result.ideas if idea and idea.strip()]
    return ideas[:IDEAS_COUNT]
