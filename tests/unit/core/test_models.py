# tests/unit/core/test_models.py - v1
"""Tests for core/models.py."""

from __future__ import annotations

import logging
import math

import pytest
from pydantic import TypeAdapter, ValidationError

from alchemy4d.core.models import (
    ByproductStep,
    ChunkEvent,
    CompleteEvent,
    CraftEvent,
    CraftValidationError,
    ErrorEvent,
    HeatStep,
    Material,
    MixStep,
    OtherStep,
    StructuredRecipe,
    parse_craft_request,
)


def _body(**overrides):
    body = {
        "materials": [{"name": "cobalt_echo", "quantity": 10, "unit": "ml"}],
        "incantation": "warm gently",
    }
    body.update(overrides)
    return body


class TestMaterial:
    def test_valid(self):
        m = Material(name="snow_ash", quantity=2.5, unit="g")
        assert m.quantity == 2.5

    def test_frozen(self):
        m = Material(name="snow_ash", quantity=1, unit="g")
        with pytest.raises(ValidationError):
            m.name = "other"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, name):
        with pytest.raises(ValidationError):
            Material(name=name, quantity=1, unit="g")

    @pytest.mark.parametrize("quantity", ["10", True, None, math.inf, math.nan])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationError):
            Material(name="ash", quantity=quantity, unit="g")

    def test_unit_may_be_empty(self):
        assert Material(name="feather", quantity=1, unit="").unit == ""


class TestParseCraftRequest:
    def test_valid(self):
        req = parse_craft_request(_body())
        assert req.materials[0].name == "cobalt_echo"
        assert req.incantation == "warm gently"

    def test_order_preserved(self):
        req = parse_craft_request(_body(materials=[
            {"name": "b", "quantity": 1, "unit": "g"},
            {"name": "a", "quantity": 1, "unit": "g"},
        ]))
        assert [m.name for m in req.materials] == ["b", "a"]

    @pytest.mark.parametrize("materials", [None, []])
    def test_materials_required(self, materials):
        with pytest.raises(CraftValidationError, match="Materials are required"):
            parse_craft_request(_body(materials=materials))

    @pytest.mark.parametrize("incantation", [None, "", "   ", 42])
    def test_incantation_required(self, incantation):
        with pytest.raises(CraftValidationError, match="Incantation is required"):
            parse_craft_request(_body(incantation=incantation))

    def test_not_an_object(self):
        with pytest.raises(CraftValidationError, match="must be an object"):
            parse_craft_request(["materials"])

    def test_bad_material_reports_location(self):
        with pytest.raises(CraftValidationError, match=r"Invalid materials\.0\.quantity"):
            parse_craft_request(_body(materials=[{"name": "a", "quantity": "lots", "unit": "g"}]))

    def test_validation_error_is_value_error(self):
        assert issubclass(CraftValidationError, ValueError)


class TestStructuredRecipe:
    def test_result_alias(self):
        recipe = StructuredRecipe.model_validate({
            "steps": [{"type": "heat", "temperature": 80}],
            "result": {"name": "Tonic", "rarity": 1, "effects": []},
        })
        assert isinstance(recipe.steps[0], HeatStep)
        assert recipe.outcome.name == "Tonic"

    def test_outcome_key(self):
        recipe = StructuredRecipe.model_validate({
            "steps": [{"type": "byproduct", "item": "dust", "quantity": 2}],
            "outcome": {"name": "Tonic", "rarity": 1.5, "effects": ["glow"]},
        })
        assert isinstance(recipe.steps[0], ByproductStep)
        assert recipe.outcome.rarity == 1.5

    def test_unknown_step_type_kept(self):
        recipe = StructuredRecipe.model_validate({
            "steps": [{"type": "teleport", "description": "blink", "destination": "moon"}],
            "result": {"name": "Tonic", "rarity": 1, "effects": []},
        })
        step = recipe.steps[0]
        assert isinstance(step, OtherStep)
        assert step.type == "teleport"
        assert step.model_dump()["destination"] == "moon"

    def test_step_without_type(self):
        recipe = StructuredRecipe.model_validate({
            "steps": [{"description": "wait"}, "stir twice"],
            "outcome": {"name": "Tonic", "rarity": 1, "effects": []},
        })
        assert [s.type for s in recipe.steps] == [None, None]
        assert recipe.steps[1].description == "stir twice"

    def test_bool_rarity_rejected(self):
        with pytest.raises(ValidationError):
            StructuredRecipe.model_validate({
                "steps": [],
                "result": {"name": "Tonic", "rarity": True, "effects": []},
            })

    def test_serialized_as_outcome(self):
        recipe = StructuredRecipe.model_validate({
            "steps": [],
            "result": {"name": "Tonic", "rarity": 1, "effects": []},
        })
        assert "outcome" in recipe.model_dump()


class TestEvents:
    def test_discriminated_union(self, sample_recipe):
        adapter = TypeAdapter(CraftEvent)
        assert isinstance(adapter.validate_python({"type": "chunk", "content": "x"}), ChunkEvent)
        assert isinstance(adapter.validate_python({"type": "error", "message": "x"}), ErrorEvent)
        complete = adapter.validate_python(
            {"type": "complete", "recipe": sample_recipe.model_dump(), "cached": True}
        )
        assert isinstance(complete, CompleteEvent)
        assert complete.recipe == sample_recipe

    def test_event_wire_shape(self):
        assert ChunkEvent(content="abc").model_dump() == {"type": "chunk", "content": "abc"}
        assert ErrorEvent(message="boom").model_dump() == {"type": "error", "message": "boom"}


class TestLenientSteps:
    def _recipe(self, *steps, **outcome):
        body = {"name": "Tonic", "rarity": 1, "effects": []}
        body.update(outcome)
        return StructuredRecipe.model_validate({"steps": list(steps), "outcome": body})

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(180, 180.0), (92.5, 92.5), ("180C", 180.0), (" -4.5 degrees", -4.5)],
    )
    def test_temperature_coerced(self, raw, expected):
        step = self._recipe({"type": "heat", "temperature": raw}).steps[0]
        assert step.temperature == expected

    @pytest.mark.parametrize("raw", ["very hot", True, [180], {"c": 180}, 10**400])
    def test_unusable_temperature_dropped(self, raw, caplog):
        caplog.set_level(logging.WARNING, logger="alchemy4d.core.models")
        step = self._recipe({"type": "heat", "description": "boil", "temperature": raw}).steps[0]
        assert isinstance(step, HeatStep)
        assert step.temperature is None
        assert step.description == "boil"
        assert any("temperature" in r.getMessage() for r in caplog.records)

    def test_byproduct_fields(self):
        step = self._recipe(
            {"type": "byproduct", "item": 7, "quantity": "2 pinches", "description": None}
        ).steps[0]
        assert step.item == "7"
        assert step.quantity == 2.0
        assert step.description == ""

    def test_byproduct_unusable_item_dropped(self):
        step = self._recipe({"type": "byproduct", "item": {"n": "ash"}, "quantity": "some"}).steps[0]
        assert step.item is None
        assert step.quantity is None

    def test_non_object_steps_dropped(self):
        recipe = self._recipe({"type": "mix"}, 42, None, ["x"])
        assert len(recipe.steps) == 1
        assert isinstance(recipe.steps[0], MixStep)

    def test_optional_outcome_text_dropped(self):
        recipe = self._recipe(description=["long"], image_url=3)
        assert recipe.outcome.description is None
        assert recipe.outcome.image_url == "3"

    @pytest.mark.parametrize(
        "outcome",
        [{"name": 5}, {"rarity": "rare"}, {"effects": "glow"}, {"effects": [1]}],
    )
    def test_required_outcome_fields_still_enforced(self, outcome):
        with pytest.raises(ValidationError):
            self._recipe({"type": "heat", "temperature": "180C"}, **outcome)

    def test_steps_must_be_array(self):
        with pytest.raises(ValidationError):
            StructuredRecipe.model_validate({
                "steps": {"type": "heat"},
                "outcome": {"name": "Tonic", "rarity": 1, "effects": []},
            })

    def test_lenient_recipe_round_trips(self, sample_recipe):
        recipe = self._recipe(
            {"type": "heat", "temperature": "60C"},
            {"type": "teleport", "destination": "moon"},
        )
        stored = sample_recipe.model_copy(update={"steps": recipe.steps})
        restored = type(sample_recipe).model_validate_json(stored.model_dump_json())
        assert restored.steps[0].temperature == 60.0
        assert isinstance(restored.steps[1], OtherStep)
        assert restored.steps[1].model_dump()["destination"] == "moon"
