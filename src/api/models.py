# src/api/models.py - v1
"""HTTP-level response models. Request bodies are validated by core.models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from alchemy4d.core.models import Recipe


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Body of a 400 returned before any stream is opened."""

    error: str


class RecipeListResponse(BaseModel):
    count: int
    recipes: list[Recipe]
