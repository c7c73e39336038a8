"""
Pytest configuration and fixtures for Dinner Planner tests.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing dinner_planner modules
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ["PLANNER_ENV"] = "development"

from dinner_planner.ai.cache import CacheEntry  # noqa: E402
from dinner_planner.ai.parsing import Generated  # noqa: E402
from dinner_planner.db.client import PlannerRepository  # noqa: E402
from dinner_planner.services.access import Caller  # noqa: E402
from dinner_planner.shopping.models import Dish, IngredientOccurrence, ManualIngredient  # noqa: E402


class FakeCacheStore:
    """In-memory dish cache keyed by (dish_name_lower, lang)."""

    def __init__(self):
        self.entries: dict[tuple[str, str], CacheEntry] = {}
        self.saved: list[tuple[str, str, str]] = []
        self.fail_lookup = False
        self.fail_save = False

    async def get_entry(self, dish_name_lower, lang):
        if self.fail_lookup:
            raise RuntimeError("cache unavailable")
        return self.entries.get((dish_name_lower, lang))

    async def set_usage_count(self, entry_id, usage_count):
        for entry in self.entries.values():
            if entry.id == entry_id:
                entry.usage_count = usage_count

    async def save_entry(self, dish_name, dish_name_lower, lang, generated: Generated):
        if self.fail_save:
            raise RuntimeError("cache write failed")
        self.saved.append((dish_name, dish_name_lower, lang))
        self.entries[(dish_name_lower, lang)] = CacheEntry(
            id=f"cache-{len(self.saved)}",
            dish_name_lower=dish_name_lower,
            lang=lang,
            recipe=generated.recipe,
            nutrition=generated.nutrition,
            usage_count=1,
            ingredients=list(generated.ingredients),
        )


class FakeGenerator:
    """Records prompts and returns a canned model response."""

    def __init__(self, response: str = "", error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response

    @property
    def calls(self) -> int:
        return len(self.prompts)


BORSCHT_RESPONSE = """```json
{
  "ingredients": [
    {"name": "Свёкла", "amount": "2", "unit": "шт"},
    {"name": "Картофель", "amount": 3, "unit": "шт"},
    {"name": "Говядина", "amount": "500", "unit": "г"}
  ],
  "recipe": "1. Сварить бульон. 2. Добавить овощи.",
  "calories": "350",
  "proteins": 20,
  "fats": 12.6,
  "carbs": null
}
```"""

NOT_FOOD_RESPONSE = '{"error": "INVALID_INPUT", "message": "Это не похоже на блюдо."}'


@pytest.fixture
def cache_store():
    return FakeCacheStore()


@pytest.fixture
def generator():
    return FakeGenerator(BORSCHT_RESPONSE)


@pytest.fixture
def mock_repo():
    """PlannerRepository with every method replaced by an AsyncMock."""
    repo = AsyncMock(spec=PlannerRepository)
    repo.get_group_preferences.return_value = {}
    repo.count_couple_members.return_value = 2
    repo.is_holiday_member.return_value = True
    repo.has_holiday_approval.return_value = False
    return repo


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    mock_table = MagicMock()
    for method in ("select", "insert", "update", "upsert", "delete", "eq", "in_", "or_", "gte", "order", "limit"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.maybe_single.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table
    return mock_client


@pytest.fixture
def caller():
    return Caller(telegram_id=111, couple_id="couple-1", first_name="Anna")


@pytest.fixture
def partner():
    return Caller(telegram_id=222, couple_id="couple-1", first_name="Boris")


def make_dish(dish_id, name, ingredients, status="selected"):
    """Build a Dish from (name, amount, unit, is_purchased) tuples."""
    return Dish(
        id=dish_id,
        name=name,
        status=status,
        ingredients=[
            IngredientOccurrence(
                id=f"{dish_id}-ing-{i}",
                name=ing_name,
                amount=amount,
                unit=unit,
                is_purchased=purchased,
                dish_id=dish_id,
            )
            for i, (ing_name, amount, unit, purchased) in enumerate(ingredients)
        ],
    )


def make_manual(manual_id, name, amount="", unit="", is_purchased=False):
    return ManualIngredient(
        id=manual_id,
        group_id="couple-1",
        name=name,
        amount=amount,
        unit=unit,
        is_purchased=is_purchased,
    )


@pytest.fixture
def sample_dishes():
    """Two selected dishes sharing onions, one proposed dish."""
    return [
        make_dish("d1", "Soup", [
            ("Onions", "2", "pcs", False),
            ("Carrot", "1,5", "pcs", True),
        ]),
        make_dish("d2", "Salad", [
            ("Onion", 1, "pcs", True),
            ("Tomatoes 🍅", "3", "pcs", False),
        ]),
        make_dish("d3", "Pie", [("Flour", "500", "g", False)], status="proposed"),
    ]


@pytest.fixture
def mock_openai():
    """Mock OpenAI client for unit tests."""
    mock_client = MagicMock()

    mock_completion = MagicMock()
    mock_completion.choices = [MagicMock(message=MagicMock(content='{"ingredients": []}'))]
    mock_client.chat.completions.create.return_value = mock_completion

    return mock_client
