"""Tests for prompt registry."""

import pytest

from staarkids.prompts.registry import clear_cache, get_prompt, list_prompts


class TestPromptRegistry:
    def test_list_prompts(self):
        prompts = list_prompts()

        assert "questions/staar_question" in prompts
        assert "tutor/nova" in prompts

    def test_substitution_keeps_json_braces(self):
        prompt = get_prompt(
            "questions/staar_question",
            subject="math",
            grade=3,
            teks_standard="3.2A",
            category="Place Value",
        )

        assert "3.2A" in prompt
        assert '"questionText"' in prompt
        assert prompt.rstrip().endswith("}")

    def test_values_are_not_expanded_again(self):
        prompt = get_prompt("tutor/nova", grade=3, message="{grade} {total_attempts}", total_attempts=9)

        assert '"{grade} {total_attempts}"' in prompt
        assert "Total attempts: 9" in prompt

    def test_missing_variable_left_in_place(self):
        prompt = get_prompt("tutor/nova", grade=3)

        assert "{message}" in prompt

    def test_unknown_prompt(self):
        with pytest.raises(FileNotFoundError, match="Prompt not found"):
            get_prompt("questions/does_not_exist")

    def test_uncached_load_matches_cached(self):
        clear_cache()
        cached = get_prompt("tutor/nova", grade=4)
        uncached = get_prompt("tutor/nova", use_cache=False, grade=4)

        assert cached == uncached
