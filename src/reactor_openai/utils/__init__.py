"""Small shared helpers with no controller dependencies."""

from reactor_openai.utils.hashing import canonical_json, fingerprint, sha256_bytes, sha256_text

__all__ = ["canonical_json", "fingerprint", "sha256_bytes", "sha256_text"]
