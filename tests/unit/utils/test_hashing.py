"""Unit tests for deterministic hashing helpers."""

from __future__ import annotations

import hashlib

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reactor_openai.utils.hashing import canonical_json, fingerprint, sha256_text

_KEYS = st.text(min_size=1, max_size=8)
_SCALARS = st.one_of(st.none(), st.booleans(), st.integers(), st.text(max_size=8))


@pytest.mark.unit
def test_sha256_text_matches_hashlib() -> None:
    assert sha256_text("sys_system") == hashlib.sha256(b"sys_system").hexdigest()


@pytest.mark.unit
def test_canonical_json_is_compact_and_sorted() -> None:
    assert canonical_json({"b": 1, "a": [True, None, "é"]}) == '{"a":[true,null,"é"],"b":1}'


@pytest.mark.unit
def test_canonical_json_rejects_non_json_values() -> None:
    with pytest.raises(TypeError):
        canonical_json({"when": object()})


@pytest.mark.unit
@settings(max_examples=50)
@given(st.dictionaries(_KEYS, _SCALARS, max_size=6))
def test_fingerprint_ignores_insertion_order(payload: dict[str, object]) -> None:
    reordered = dict(reversed(list(payload.items())))

    assert fingerprint(reordered) == fingerprint(payload)


@pytest.mark.unit
def test_fingerprint_changes_with_content() -> None:
    assert fingerprint({"sys_system": ["state"]}) != fingerprint({"sys_system": ["restart"]})
