# src/extraction/recipe_extractor.py - v1
"""Extract a structured recipe from free-form generator output.

The generator is asked for bare JSON but its output is untrusted: the
extractor takes the first balanced ``{...}`` block in the buffer, decodes
it and validates it against StructuredRecipe. Failures are returned as a
typed result, never raised, so the caller can emit an error event.
"""

from __future__ import annotations

import json
import logging
from typing import Literal

from pydantic import BaseModel, ValidationError

from alchemy4d.core.models import StructuredRecipe

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Generator output could not be turned into a recipe."""

    kind: str = "extraction_error"


class MalformedBlock(ExtractionError):
    """No balanced, decodable JSON block in the buffer."""

    kind = "malformed_block"


class SchemaMismatch(ExtractionError):
    """A JSON block was found but lacks required recipe fields."""

    kind = "schema_mismatch"


class ExtractionResult(BaseModel):
    """Outcome of ``extract_recipe``: either a recipe or a failure kind + detail."""

    recipe: StructuredRecipe | None = None
    error: Literal["malformed_block", "schema_mismatch"] | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.recipe is not None


def find_json_block(text: str) -> str | None:
    """Return the block from the first '{' to its matching '}', or None.

    Braces inside JSON string literals (including escaped quotes) are not
    counted.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_recipe(text: str) -> StructuredRecipe:
    """Parse generator output into a StructuredRecipe.

    Raises:
        MalformedBlock: No balanced block, or the block is not valid JSON.
        SchemaMismatch: Required fields missing or of the wrong type.
    """
    block = find_json_block(text)
    if block is None:
        raise MalformedBlock("No JSON object found in response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise MalformedBlock(f"Invalid JSON: {e.msg} at position {e.pos}") from e
    except RecursionError as e:
        raise MalformedBlock("Invalid JSON: nesting too deep") from e
    except ValueError as e:
        # e.g. integer literals beyond the interpreter's digit limit
        raise MalformedBlock(f"Invalid JSON: {e}") from e

    try:
        return StructuredRecipe.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"]) or "<root>"
        raise SchemaMismatch(f"{where}: {first['msg']} ({e.error_count()} error(s))") from e


def extract_recipe(text: str) -> ExtractionResult:
    """Non-raising wrapper around ``parse_recipe``."""
    try:
        recipe = parse_recipe(text)
    except ExtractionError as e:
        logger.debug("Recipe extraction failed (%s): %s", e.kind, e)
        return ExtractionResult(error=e.kind, detail=str(e))  # type: ignore[arg-type]
    return ExtractionResult(recipe=recipe)
