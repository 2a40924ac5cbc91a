# src/llm/prompts.py - v1
"""Prompt construction for recipe generation.

The craft core never inspects these strings; it only consumes the text
the model streams back.
"""

from __future__ import annotations

from alchemy4d.core.models import CraftRequest, Material

RECIPE_SYSTEM = (
    "You are the alchemical engine of Alchemy 4D. "
    "Answer with a single JSON object and nothing else."
)

_RECIPE_FORMAT = """{
  "steps": [
    {"type": "heat", "description": "Heat ramp to X degrees", "temperature": X},
    {"type": "mix", "description": "Mixing action"},
    {"type": "transform", "description": "Transformation"},
    {"type": "byproduct", "description": "By-product created", "item": "item_name", "quantity": X}
  ],
  "result": {
    "name": "Potion Name",
    "rarity": 1-100,
    "effects": ["effect1", "effect2"]
  }
}"""


def format_material(material: Material) -> str:
    """Render a material as e.g. '10ml cobalt_echo'."""
    return f"{material.quantity}{material.unit} {material.name}"


def build_recipe_prompt(request: CraftRequest) -> str:
    """Build the user prompt for one craft request."""
    materials = ", ".join(format_material(m) for m in request.materials)
    return (
        "Generate a reaction sequence for these materials and incantation.\n\n"
        f"Materials: {materials}\n"
        f'Incantation: "{request.incantation}"\n\n'
        "Describe the reaction step by step using this JSON format:\n"
        f"{_RECIPE_FORMAT}\n\n"
        "Be creative but consistent: the same materials and incantation "
        "should always produce similar results."
    )
