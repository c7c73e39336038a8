"""
Dinner Planner - LLM Client.

Two entry points over one OpenAI client:
- generate_text: raw completion text, parsed by ai.parsing
- call_llm: Instructor-wrapped call with a guaranteed response schema
"""

import logging
from typing import TypeVar

import instructor
from openai import OpenAI
from pydantic import BaseModel

from dinner_planner.config import settings
from dinner_planner.errors import GenerationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Singleton client instances
_openai_client: OpenAI | None = None
_instructor_client: instructor.Instructor | None = None


def get_openai_client() -> OpenAI:
    """Get the OpenAI client, created on first use."""
    global _openai_client

    if _openai_client is None:
        _openai_client = OpenAI(api_key=settings.openai_api_key)

    return _openai_client


def get_client() -> instructor.Instructor:
    """Get the Instructor-wrapped OpenAI client."""
    global _instructor_client

    if _instructor_client is None:
        _instructor_client = instructor.from_openai(get_openai_client())

    return _instructor_client


async def generate_text(prompt: str, *, temperature: float | None = None) -> str:
    """
    Send a single-message prompt and return the raw response text.

    Raises:
        GenerationError: the API call failed
    """
    client = get_openai_client()
    model = settings.openai_model

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.generation_temperature if temperature is None else temperature,
            store=False,
        )
    except Exception as e:
        raise GenerationError(f"{model} completion failed: {e}") from e

    if not response.choices:
        raise GenerationError(f"{model} returned no choices")

    return response.choices[0].message.content or ""


async def call_llm(
    *,
    response_model: type[T],
    system_prompt: str,
    user_prompt: str,
    max_retries: int = 2,
) -> T:
    """
    Make a structured LLM call with guaranteed schema compliance.

    Args:
        response_model: Pydantic model class for the response
        system_prompt: System message setting context
        user_prompt: User message with the actual request
        max_retries: Number of retries if response doesn't match schema

    Returns:
        Instance of response_model with validated data

    Raises:
        GenerationError: the call failed or never matched the schema
    """
    client = get_client()
    model = settings.openai_model

    try:
        return client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_model=response_model,
            max_retries=max_retries,
            temperature=settings.generation_temperature,
            store=False,
        )
    except Exception as e:
        logger.warning(f"Structured call for {response_model.__name__} failed: {e}")
        raise GenerationError(f"{model} structured call failed: {e}") from e
