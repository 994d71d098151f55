"""
reactor-openai control plane.

Purpose
- Reconciliation passes, failure escalation, prompt dispatch, and the
  controller that owns their shared state.
"""

from reactor_openai.control_plane.backoff import (
    BackoffDecision,
    FailureTracker,
    backoff_table,
    compute_retry_delay_ms,
    status_for_failures,
)
from reactor_openai.control_plane.controller import CompletionController, ConfigSource, PassOutcome
from reactor_openai.control_plane.dispatch import PromptDispatcher, validate_prompt
from reactor_openai.control_plane.reconciler import EntityError, ReconcileResult, Reconciler

__all__ = [
    "BackoffDecision",
    "CompletionController",
    "ConfigSource",
    "EntityError",
    "FailureTracker",
    "PassOutcome",
    "PromptDispatcher",
    "ReconcileResult",
    "Reconciler",
    "backoff_table",
    "compute_retry_delay_ms",
    "status_for_failures",
    "validate_prompt",
]
