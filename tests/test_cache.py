"""Tests for the dish cache service."""

import asyncio

from conftest import NOT_FOOD_RESPONSE, FakeGenerator

from dinner_planner.ai.cache import CacheEntry, DishCacheService, cache_key
from dinner_planner.ai.parsing import Failed, Generated, Rejected


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestCacheKey:
    def test_lower_and_trim(self):
        assert cache_key("  Борщ ") == "борщ"
        assert cache_key("Pasta Carbonara") == "pasta carbonara"

    def test_no_other_normalization(self):
        assert cache_key("Tomatoes 🍅") == "tomatoes 🍅"


class TestCacheEntry:
    def test_from_record(self):
        entry = CacheEntry.from_record({
            "id": 7,
            "dish_name_lower": "борщ",
            "lang": "ru",
            "recipe": None,
            "calories": 300,
            "usage_count": None,
            "dish_cache_ingredients": [{"name": "Свёкла", "amount": "2", "unit": "шт"}],
        })
        assert entry.id == "7"
        assert entry.recipe == ""
        assert entry.usage_count == 0
        assert entry.nutrition.calories == 300
        assert entry.nutrition.proteins is None
        assert [ing.name for ing in entry.ingredients] == ["Свёкла"]


class TestLookupOrGenerate:
    """Tests for cache hits, misses and failures."""

    def test_miss_generates_and_saves(self, cache_store, generator):
        service = DishCacheService(cache_store, generator)

        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert isinstance(result, Generated)
        assert result.cached is False
        assert generator.calls == 1
        assert "Борщ" in generator.prompts[0]
        assert cache_store.saved == [("Борщ", "борщ", "ru")]

    def test_second_lookup_hits_cache(self, cache_store, generator):
        service = DishCacheService(cache_store, generator)

        first = run(service.lookup_or_generate("Борщ", "ru"))
        second = run(service.lookup_or_generate("  БОРЩ ", "ru"))

        assert generator.calls == 1
        assert second.cached is True
        assert second.ingredients == first.ingredients
        assert second.recipe == first.recipe
        assert second.nutrition == first.nutrition
        assert cache_store.entries[("борщ", "ru")].usage_count == 2

    def test_language_is_part_of_key(self, cache_store, generator):
        service = DishCacheService(cache_store, generator)

        run(service.lookup_or_generate("Борщ", "ru"))
        run(service.lookup_or_generate("Борщ", "en"))

        assert generator.calls == 2
        assert set(cache_store.entries) == {("борщ", "ru"), ("борщ", "en")}

    def test_rejection_not_cached(self, cache_store):
        generator = FakeGenerator(NOT_FOOD_RESPONSE)
        service = DishCacheService(cache_store, generator)

        result = run(service.lookup_or_generate("write me a poem", "ru"))

        assert isinstance(result, Rejected)
        assert result.message == "Это не похоже на блюдо."
        assert cache_store.entries == {}

    def test_generator_error_is_failed(self, cache_store):
        generator = FakeGenerator(error=RuntimeError("timeout"))
        service = DishCacheService(cache_store, generator)

        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert isinstance(result, Failed)
        assert "timeout" in result.reason
        assert cache_store.entries == {}

    def test_unparsable_output_is_failed(self, cache_store):
        service = DishCacheService(cache_store, FakeGenerator("I am not JSON"))

        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert isinstance(result, Failed)
        assert cache_store.saved == []

    def test_lookup_failure_treated_as_miss(self, cache_store, generator):
        cache_store.fail_lookup = True
        service = DishCacheService(cache_store, generator)

        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert isinstance(result, Generated)
        assert generator.calls == 1

    def test_save_failure_still_returns_result(self, cache_store, generator):
        cache_store.fail_save = True
        service = DishCacheService(cache_store, generator)

        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert isinstance(result, Generated)
        assert len(result.ingredients) == 3

    def test_usage_bump_failure_ignored(self, cache_store, generator):
        service = DishCacheService(cache_store, generator)
        run(service.lookup_or_generate("Борщ", "ru"))

        async def broken(entry_id, usage_count):
            raise RuntimeError("write failed")

        cache_store.set_usage_count = broken
        result = run(service.lookup_or_generate("Борщ", "ru"))

        assert result.cached is True


def test_default_generator_is_openai_backend(cache_store):
    from dinner_planner.ai.client import generate_text

    assert DishCacheService(cache_store).generate is generate_text

