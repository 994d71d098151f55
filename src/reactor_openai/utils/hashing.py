"""
reactor-openai — hashing utilities

Purpose
- Deterministic SHA-256 helpers for bytes, text, and JSON-shaped values.

Functional requirements
- Canonical JSON uses sorted keys and compact separators so equal mappings
  hash identically regardless of insertion order.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "canonical_json",
    "fingerprint",
    "sha256_bytes",
    "sha256_text",
]


def sha256_bytes(data: bytes) -> str:
    """Return SHA-256 hex digest for raw bytes."""

    return hashlib.sha256(data).hexdigest()


def sha256_text(text: str, *, encoding: str = "utf-8") -> str:
    """Return SHA-256 hex digest for text encoded with ``encoding``."""

    return sha256_bytes(text.encode(encoding))


def canonical_json(value: object) -> str:
    """Serialize ``value`` deterministically; raises ``TypeError`` for non-JSON values."""

    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint(payload: Mapping[str, object]) -> str:
    """Return the SHA-256 of the canonical JSON form of ``payload``."""

    return sha256_text(canonical_json(payload))
