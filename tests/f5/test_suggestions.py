"""Tests for teaching activity suggestions (F5)."""

from unittest.mock import MagicMock

import pytest

from preprimary.core.domain import ClassLevel
from preprimary.core.suggestions import (
    MAX_PROMPT_LENGTH,
    detect_area,
    detect_class_level,
    get_suggestion,
    offline_suggestion,
)
from preprimary.llm.client import LLMConnectionError


class TestDetection:
    @pytest.mark.parametrize(
        "prompt, expected",
        [
            ("Counting games for LKG", ClassLevel.LKG),
            ("ideas for my nursery class", ClassLevel.NURSERY),
            ("UKG reading practice", ClassLevel.UKG),
            ("rainy day ideas", None),
        ],
    )
    def test_class_level(self, prompt, expected):
        assert detect_class_level(prompt) is expected

    @pytest.mark.parametrize(
        "prompt, expected",
        [
            ("story time ideas", "literacy"),
            ("Shape games", "numeracy"),
            ("outdoor movement", "motor"),
            ("making friends", "social"),
            ("a rainy day", "general"),
        ],
    )
    def test_area(self, prompt, expected):
        assert detect_area(prompt) == expected


class TestOfflineSuggestion:
    def test_class_and_area(self):
        text = offline_suggestion("counting games for LKG")
        assert text.startswith("Here are some pre-numeracy activities for LKG students (age 4):")
        assert "1. Number Formation" in text
        assert "5. Measure It" in text

    def test_explicit_class_wins(self):
        text = offline_suggestion("letter games for LKG", ClassLevel.UKG)
        assert "UKG students (age 5)" in text

    def test_area_without_catalogue_uses_class_general(self):
        text = offline_suggestion("movement ideas", ClassLevel.NURSERY)
        assert text.startswith("Here are some general activities for Nursery students (age 3):")

    def test_no_class(self):
        text = offline_suggestion("something fun")
        assert text.startswith("Here are some general activities for pre-primary students:")
        assert "Weather Chart" in text


class TestGetSuggestion:
    def test_offline_without_api_key(self, isolated_env):
        suggestion = get_suggestion("counting games for LKG")
        assert suggestion.source == "offline"
        assert "LKG" in suggestion.text

    def test_uses_client(self, isolated_env):
        client = MagicMock()
        client.simple_chat.return_value = "  1. Bead counting  \n"

        suggestion = get_suggestion("counting games", class_level="UKG", client=client)

        assert suggestion.source == "ai"
        assert suggestion.text == "1. Bead counting"
        system_prompt, user_message = client.simple_chat.call_args.args
        assert "pre-primary teachers" in system_prompt
        assert user_message == "Class: UKG (around 5 years old).\ncounting games"

    def test_no_class_context_when_unknown(self, isolated_env):
        client = MagicMock()
        client.simple_chat.return_value = "ideas"
        get_suggestion("rainy day ideas", client=client)
        assert client.simple_chat.call_args.args[1] == "rainy day ideas"

    def test_provider_failure_falls_back(self, isolated_env):
        client = MagicMock()
        client.simple_chat.side_effect = LLMConnectionError("down")

        suggestion = get_suggestion("story ideas for nursery", client=client)
        assert suggestion.source == "offline"
        assert "pre-literacy activities for Nursery" in suggestion.text

    @pytest.mark.parametrize("prompt", ["", "   ", "x" * (MAX_PROMPT_LENGTH + 1)])
    def test_invalid_prompt(self, isolated_env, prompt):
        with pytest.raises(ValueError):
            get_suggestion(prompt, client=MagicMock())
