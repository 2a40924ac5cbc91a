# src/cache/fingerprint.py - v1
"""Content fingerprint for craft requests.

Two requests with the same multiset of materials (in any order) and the
same incantation modulo case and surrounding whitespace share a
fingerprint. Any change to a material's name, quantity or unit, or to the
incantation text, produces a different one.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Sequence

from alchemy4d.core.models import Material


def compute_fingerprint(materials: Sequence[Material], incantation: str) -> str:
    """Compute the SHA-256 hex fingerprint of a craft request.

    Args:
        materials: Validated material entries, any order.
        incantation: Raw incantation as submitted.

    Returns:
        64-character lowercase hex digest.
    """
    return hashlib.sha256(canonical_encoding(materials, incantation).encode("utf-8")).hexdigest()


def canonical_encoding(materials: Sequence[Material], incantation: str) -> str:
    """Deterministic compact JSON encoding hashed by compute_fingerprint."""
    # Quantities compare exactly; large ints are never converted to float.
    ordered = sorted(
        materials, key=lambda m: (m.name, m.unit, _normalize_quantity(m.quantity))
    )
    payload = {
        "materials": [
            {"name": m.name, "quantity": _normalize_quantity(m.quantity), "unit": m.unit}
            for m in ordered
        ],
        "incantation": normalize_incantation(incantation),
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def normalize_incantation(incantation: str) -> str:
    """Lower-case and trim an incantation."""
    return incantation.lower().strip()


def _normalize_quantity(quantity: Any) -> int | float:
    """10.0 and 10 encode identically."""
    if isinstance(quantity, float) and quantity.is_integer():
        return int(quantity)
    return quantity
