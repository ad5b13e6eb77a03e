"""Identifier generation for nodes and branches."""

from __future__ import annotations

import uuid


def generate_id(prefix: str) -> str:
    """Return a fresh identifier such as ``node-3f9c2a1b7d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


__all__ = ["generate_id"]
