# tests/unit/extraction/test_recipe_extractor.py - v1
"""Tests for extraction/recipe_extractor.py."""

from __future__ import annotations

import json

import pytest

from alchemy4d.extraction.recipe_extractor import (
    MalformedBlock,
    SchemaMismatch,
    extract_recipe,
    find_json_block,
    parse_recipe,
)
from tests.conftest import RECIPE_JSON, RECIPE_PAYLOAD


class TestFindJsonBlock:
    def test_no_brace(self):
        assert find_json_block("no json here") is None

    def test_unbalanced(self):
        assert find_json_block('prefix {"a": {"b": 1}') is None

    def test_surrounding_prose(self):
        assert find_json_block('Sure! {"a": 1} Hope this helps') == '{"a": 1}'

    def test_nested(self):
        assert find_json_block('x {"a": {"b": {}}} y') == '{"a": {"b": {}}}'

    def test_braces_inside_strings(self):
        text = 'x {"a": "}{", "b": "\\"}"} tail }'
        block = find_json_block(text)
        assert json.loads(block) == {"a": "}{", "b": '"}'}

    def test_first_block_wins(self):
        assert find_json_block('{"a": 1} {"b": 2}') == '{"a": 1}'


class TestParseRecipe:
    def test_valid_with_prose(self):
        recipe = parse_recipe(f"Here you go:\n{RECIPE_JSON}\nEnjoy")
        assert recipe.outcome.name == "Frostbound Draught"
        assert [s.type for s in recipe.steps] == ["mix", "heat", "byproduct"]

    def test_no_block(self):
        with pytest.raises(MalformedBlock):
            parse_recipe("I cannot help with that")

    def test_invalid_json(self):
        with pytest.raises(MalformedBlock, match="Invalid JSON"):
            parse_recipe("{steps: [oops]}")

    def test_missing_steps(self):
        with pytest.raises(SchemaMismatch, match="steps"):
            parse_recipe(json.dumps({"result": RECIPE_PAYLOAD["result"]}))

    def test_missing_outcome(self):
        with pytest.raises(SchemaMismatch):
            parse_recipe(json.dumps({"steps": []}))

    @pytest.mark.parametrize("field,value", [
        ("name", 7),
        ("rarity", "high"),
        ("rarity", True),
        ("effects", "chill"),
    ])
    def test_wrong_outcome_types(self, field, value):
        payload = json.loads(RECIPE_JSON)
        payload["result"][field] = value
        with pytest.raises(SchemaMismatch):
            parse_recipe(json.dumps(payload))

    def test_steps_not_array(self):
        payload = json.loads(RECIPE_JSON)
        payload["steps"] = {"type": "mix"}
        with pytest.raises(SchemaMismatch):
            parse_recipe(json.dumps(payload))

    def test_odd_step_fields_do_not_fail_recipe(self):
        payload = json.loads(RECIPE_JSON)
        payload["steps"] = [
            {"type": "heat", "description": "simmer", "temperature": "180C"},
            {"type": "byproduct", "item": ["ash"], "quantity": "a pinch"},
            {"type": "chant", "description": "hum softly"},
        ]
        recipe = parse_recipe(json.dumps(payload))
        assert recipe.steps[0].temperature == 180.0
        assert recipe.steps[1].item is None
        assert recipe.steps[1].quantity is None
        assert recipe.steps[2].type == "chant"


class TestExtractRecipe:
    def test_ok(self):
        result = extract_recipe(RECIPE_JSON)
        assert result.ok
        assert result.error is None

    def test_malformed_kind(self):
        result = extract_recipe('{"steps": [')
        assert not result.ok
        assert result.error == "malformed_block"
        assert result.detail

    def test_schema_kind(self):
        result = extract_recipe('{"steps": "nope"}')
        assert result.error == "schema_mismatch"
        assert result.recipe is None

    def test_never_raises(self):
        for text in ["", "}", "{{{", '{"a": 1', "null", '{"steps": [], "result": null}']:
            assert extract_recipe(text).ok is False


class TestHostileBlocks:
    @pytest.mark.parametrize(
        "text",
        [
            '{"steps":' + "[" * 100_000 + "]" * 100_000 + "}",
            '{"steps":[],"outcome":{"name":"n","rarity":' + "9" * 5000 + ',"effects":[]}}',
        ],
        ids=["deep_nesting", "huge_integer"],
    )
    def test_undecodable_block_is_malformed(self, text):
        result = extract_recipe(text)
        assert result.ok is False
        assert result.error == "malformed_block"
        assert result.detail.startswith("Invalid JSON")

    def test_parse_recipe_wraps_decoder_limits(self):
        with pytest.raises(MalformedBlock):
            parse_recipe('{"a":' + "[" * 100_000 + "]" * 100_000 + "}")
