"""Tests for the LLM client wrappers and idea suggestions."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dinner_planner.ai.client import generate_text
from dinner_planner.ai.ideas import IDEAS_COUNT, DinnerIdeas, generate_ideas
from dinner_planner.errors import GenerationError


def run(coro):
    return asyncio.run(coro)


class TestGenerateText:
    def test_returns_content(self, mock_openai):
        with patch("dinner_planner.ai.client.get_openai_client", return_value=mock_openai):
            text = run(generate_text("Input: Борщ"))

        assert text == '{"ingredients": []}'
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Input: Борщ"}]
        assert kwargs["store"] is False

    def test_temperature_override(self, mock_openai):
        with patch("dinner_planner.ai.client.get_openai_client", return_value=mock_openai):
            run(generate_text("x", temperature=0.0))

        assert mock_openai.chat.completions.create.call_args.kwargs["temperature"] == 0.0

    def test_api_failure(self, mock_openai):
        mock_openai.chat.completions.create.side_effect = RuntimeError("429 Too Many Requests")

        with patch("dinner_planner.ai.client.get_openai_client", return_value=mock_openai):
            with pytest.raises(GenerationError):
                run(generate_text("x"))

    def test_no_choices(self, mock_openai):
        mock_openai.chat.completions.create.return_value = MagicMock(choices=[])

        with patch("dinner_planner.ai.client.get_openai_client", return_value=mock_openai):
            with pytest.raises(GenerationError):
                run(generate_text("x"))


class TestGenerateIdeas:
    """Tests for dinner idea suggestions."""

    def test_trims_and_limits(self):
        result = DinnerIdeas(ideas=[" Ramen ", "", "Sushi", "Gyoza", "Tempura", "Udon"])

        with patch("dinner_planner.ai.ideas.call_llm", new_callable=AsyncMock, return_value=result) as mock_call:
            ideas = run(generate_ideas({"cuisines": ["japanese"]}, "en"))

        assert ideas == ["Ramen", "Sushi", "Gyoza", "Tempura"]
        assert len(ideas) == IDEAS_COUNT
        assert "japanese" in mock_call.await_args.kwargs["system_prompt"]
        assert mock_call.await_args.kwargs["response_model"] is DinnerIdeas

    def test_failure_returns_empty(self):
        with patch(
            "dinner_planner.ai.ideas.call_llm",
            new_callable=AsyncMock,
            side_effect=GenerationError("down"),
        ):
            assert run(generate_ideas(None, "ru")) == []
