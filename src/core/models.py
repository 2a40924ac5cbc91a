# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    Tag,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger(__name__)

Number = Union[StrictInt, StrictFloat]


class CraftValidationError(ValueError):
    """Raised when a craft request is malformed (rejected before any stream opens)."""


# === REQUEST ===


class Material(BaseModel):
    """One material entry of a craft request."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr = Field(min_length=1)
    quantity: Number
    unit: StrictStr

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("material name must not be blank")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_finite(cls, v: int | float) -> int | float:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("material quantity must be a finite number")
        return v


class CraftRequest(BaseModel):
    """Materials (in submission order) plus a free-text incantation."""

    model_config = ConfigDict(frozen=True)

    materials: list[Material] = Field(min_length=1)
    incantation: StrictStr

    @field_validator("incantation")
    @classmethod
    def _incantation_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("incantation must not be blank")
        return v


def parse_craft_request(data: Any) -> CraftRequest:
    """Validate raw request data into a CraftRequest.

    Raises:
        CraftValidationError: If materials or incantation are missing or malformed.
    """
    if isinstance(data, CraftRequest):
        return data
    if not isinstance(data, dict):
        raise CraftValidationError("Request body must be an object")
    if not data.get("materials"):
        raise CraftValidationError("Materials are required")
    if not isinstance(data.get("incantation"), str) or not data["incantation"].strip():
        raise CraftValidationError("Incantation is required")
    try:
        return CraftRequest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"])
        raise CraftValidationError(f"Invalid {where}: {first['msg']}") from e


# === RECIPE ===
#
# Enforced: ``steps`` is an array and outcome name, rarity and effects are
# present and typed. Step fields are advisory: an unexpected shape is
# coerced where possible, otherwise dropped with a warning.

STEP_TYPES = ("heat", "mix", "transform", "byproduct")

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")


def _lenient_number(value: Any, field: str) -> float | None:
    """Coerce an advisory numeric field: 180, 180.5 or "180C" -> float, else None."""
    if value is None:
        return None
    number: float | None = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            number = None
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            number = float(match.group(1))
    if number is None or not math.isfinite(number):
        logger.warning("Dropping step %s: not a usable number (%s)", field, type(value).__name__)
        return None
    return number


def _lenient_text(value: Any, field: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    logger.warning("Dropping %s: expected text, got %s", field, type(value).__name__)
    return None


class _StepBase(BaseModel):
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, v: Any) -> str:
        return _lenient_text(v, "step description") or ""

    @field_validator("temperature", "quantity", mode="before", check_fields=False)
    @classmethod
    def _coerce_number(cls, v: Any, info: ValidationInfo) -> float | None:
        return _lenient_number(v, info.field_name)


class HeatStep(_StepBase):
    type: Literal["heat"]
    temperature: float | None = None


class MixStep(_StepBase):
    type: Literal["mix"]


class TransformStep(_StepBase):
    type: Literal["transform"]


class ByproductStep(_StepBase):
    type: Literal["byproduct"]
    item: str | None = None
    quantity: float | None = None

    @field_validator("item", mode="before")
    @classmethod
    def _coerce_item(cls, v: Any) -> str | None:
        return _lenient_text(v, "byproduct item")


class OtherStep(_StepBase):
    """A step with a missing or unrecognized ``type``; extra keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> str | None:
        return _lenient_text(v, "step type")


def _step_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if isinstance(kind, str) and kind in STEP_TYPES:
        return kind
    return "other"


Step = Annotated[
    Union[
        Annotated[HeatStep, Tag("heat")],
        Annotated[MixStep, Tag("mix")],
        Annotated[TransformStep, Tag("transform")],
        Annotated[ByproductStep, Tag("byproduct")],
        Annotated[OtherStep, Tag("other")],
    ],
    Discriminator(_step_tag),
]


class Outcome(BaseModel):
    """The potion produced by a recipe."""

    name: StrictStr
    rarity: Number
    effects: list[StrictStr]
    description: str | None = None
    image_url: str | None = None

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def _coerce_optional_text(cls, v: Any, info: ValidationInfo) -> str | None:
        return _lenient_text(v, f"outcome {info.field_name}")


class StructuredRecipe(BaseModel):
    """Steps + outcome decoded from generator output.

    The generator may name the outcome object either ``outcome`` or ``result``.
    A bare string in ``steps`` becomes an untyped step with that description.
    """

    steps: list[Step]
    outcome: Outcome = Field(validation_alias=AliasChoices("outcome", "result"))

    @field_validator("steps", mode="before")
    @classmethod
    def _coerce_step_items(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        steps = []
        for i, item in enumerate(v):
            if isinstance(item, (dict, BaseModel)):
                steps.append(item)
            elif isinstance(item, str):
                steps.append({"description": item})
            else:
                logger.warning("Dropping step %d: expected an object, got %s", i, type(item).__name__)
        return steps


class Recipe(BaseModel):
    """A crafted recipe as stored in the recipe cache. Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    hash: str
    materials: list[Material]
    incantation: str
    steps: list[Step]
    outcome: Outcome
    created_at: datetime


# === STREAM EVENTS ===


class ChunkEvent(BaseModel):
    """Raw text fragment relayed from the generator."""

    type: Literal["chunk"] = "chunk"
    content: str


class CompleteEvent(BaseModel):
    """Terminal event carrying the finished recipe."""

    type: Literal["complete"] = "complete"
    recipe: Recipe
    cached: bool


class ErrorEvent(BaseModel):
    """Terminal event carrying a human-readable failure message."""

    type: Literal["error"] = "error"
    message: str


CraftEvent = Annotated[
    Union[ChunkEvent, CompleteEvent, ErrorEvent],
    Field(discriminator="type"),
]
