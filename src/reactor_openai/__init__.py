"""
reactor-openai — package root

Purpose
- Chat-completion backends (OpenAI, Azure OpenAI) exposed as managed entities
  of a host automation runtime, kept in sync by periodic reconciliation.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
