import pytest

from recipe_ai.app.core.config import DEFAULT_PROMPTS_DIR
from recipe_ai.app.schemas.server_config import PromptConfig, ServerConfigKey
from recipe_ai.app.services.ai.prompts.loader import (
    PROMPT_NAME_TO_CONFIG_KEY,
    DefaultPromptNotFoundError,
    FileDefaultPromptProvider,
    PromptName,
    StaticDefaultPromptProvider,
    fill_prompt,
    load_prompt,
)


def test_fill_prompt_replaces_single_variable():
    assert fill_prompt("Hello {{name}}!", {"name": "World"}) == "Hello World!"


def test_fill_prompt_replaces_multiple_variables():
    template = "{{greeting}} {{name}}, welcome to {{place}}!"
    result = fill_prompt(template, {"greeting": "Hello", "name": "Alice", "place": "Wonderland"})
    assert result == "Hello Alice, welcome to Wonderland!"


def test_fill_prompt_replaces_repeated_placeholder():
    assert fill_prompt("{{n}} and {{n}}", {"n": "X"}) == "X and X"
    assert fill_prompt("{{name}} likes {{name}}'s {{thing}}", {"name": "Bob", "thing": "car"}) == "Bob likes Bob's car"


def test_fill_prompt_with_no_vars_is_identity():
    for template in ["Hello {{name}}!", "", "plain text", "{{a}}{{b}}"]:
        assert fill_prompt(template, {}) == template


def test_fill_prompt_leaves_unknown_placeholders():
    assert fill_prompt("{{a}} {{b}}", {"a": "1"}) == "1 {{b}}"


def test_fill_prompt_empty_template():
    assert fill_prompt("", {"name": "World"}) == ""


def test_fill_prompt_multiline():
    template = "Line 1: {{var1}}\nLine 2: {{var2}}\nLine 3: {{var1}} again"
    result = fill_prompt(template, {"var1": "First", "var2": "Second"})
    assert result == "Line 1: First\nLine 2: Second\nLine 3: First again"


def test_fill_prompt_inserts_special_characters_literally():
    assert fill_prompt("{{p}}", {"p": "$1 (x)"}) == "$1 (x)"
    assert fill_prompt("Pattern: {{pattern}}", {"pattern": "$1 (test) [match] \\1 {{other}}"}) == (
        "Pattern: $1 (test) [match] \\1 {{other}}"
    )


def test_every_prompt_name_maps_to_config_key():
    assert set(PROMPT_NAME_TO_CONFIG_KEY) == set(PromptName)
    assert PROMPT_NAME_TO_CONFIG_KEY[PromptName.RECIPE_EXTRACTION] == ServerConfigKey.PROMPT_RECIPE_EXTRACTION
    assert PROMPT_NAME_TO_CONFIG_KEY[PromptName.UNIT_CONVERSION] == ServerConfigKey.PROMPT_UNIT_CONVERSION


def test_bundled_default_prompts_exist():
    provider = FileDefaultPromptProvider(DEFAULT_PROMPTS_DIR)
    for name in PromptName:
        assert provider.default_for(name).strip()
    assert "{{targetSystem}}" in provider.default_for(PromptName.UNIT_CONVERSION)


def test_file_provider_reads_named_file(tmp_path):
    (tmp_path / "recipe-extraction.txt").write_text("From file", encoding="utf-8")
    provider = FileDefaultPromptProvider(tmp_path)
    assert provider.default_for(PromptName.RECIPE_EXTRACTION) == "From file"


def test_file_provider_missing_file_raises(tmp_path):
    provider = FileDefaultPromptProvider(tmp_path)
    with pytest.raises(DefaultPromptNotFoundError):
        provider.default_for(PromptName.UNIT_CONVERSION)


@pytest.mark.asyncio
async def test_load_prompt_uses_default_without_override(store, default_prompts):
    result = await load_prompt(PromptName.RECIPE_EXTRACTION, store, default_prompts)
    assert result == "Default recipe extraction prompt content"


@pytest.mark.asyncio
async def test_load_prompt_prefers_override(store, default_prompts):
    await store.set(
        ServerConfigKey.PROMPT_RECIPE_EXTRACTION,
        PromptConfig(content="My custom recipe extraction prompt"),
        "admin-1",
        False,
    )
    result = await load_prompt(PromptName.RECIPE_EXTRACTION, store, default_prompts)
    assert result == "My custom recipe extraction prompt"

    other = await load_prompt(PromptName.UNIT_CONVERSION, store, default_prompts)
    assert other == "Default unit conversion prompt content"


@pytest.mark.asyncio
async def test_load_prompt_missing_default_is_fatal_for_that_prompt(store):
    defaults = StaticDefaultPromptProvider({PromptName.RECIPE_EXTRACTION: "only this one"})
    assert await load_prompt(PromptName.RECIPE_EXTRACTION, store, defaults) == "only this one"
    with pytest.raises(DefaultPromptNotFoundError):
        await load_prompt(PromptName.UNIT_CONVERSION, store, defaults)
