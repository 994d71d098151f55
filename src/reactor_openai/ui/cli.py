"""Command-line interface router for reactor-openai."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from reactor_openai.config import (
    ControllerConfig,
    effective_config,
    load_config,
)
from reactor_openai.constants import DEFAULT_ERROR_INTERVAL_MS, PROMPT_ACTION
from reactor_openai.control_plane import CompletionController, PassOutcome, backoff_table
from reactor_openai.domain.errors import UnknownEntityError
from reactor_openai.entities import InMemoryEntityStore
from reactor_openai.observability import LoggingConfig, configure_from_config
from reactor_openai.providers import HttpxTransport

DEFAULT_BACKOFF_ROWS: Final[int] = 40


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="reactor-openai",
        description=(
            "reactor-openai — chat-completion backends as managed entities.\n\n"
            "Common workflows:\n"
            "  reactor-openai reconcile --config reactor_openai.toml\n"
            "  reactor-openai prompt --config reactor_openai.toml --model gpt 'Hello there'\n"
            "  reactor-openai backoff --failures 40\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./reactor_openai.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log at DEBUG level.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # reconcile -----------------------------------------------------------
    reconcile_parser = subparsers.add_parser(
        "reconcile",
        parents=[common],
        help="Run one reconciliation pass against an in-memory store",
    )
    reconcile_parser.set_defaults(handler=_cmd_reconcile)

    # prompt --------------------------------------------------------------
    prompt_parser = subparsers.add_parser(
        "prompt",
        parents=[common],
        help="Reconcile once, then send a prompt to one configured model",
    )
    prompt_parser.add_argument("--model", dest="model_id", required=True, help="Model entry id")
    prompt_parser.add_argument("text", help="Prompt text")
    prompt_parser.add_argument("--max-tokens", type=int, default=None)
    prompt_parser.add_argument("--temperature", type=float, default=None)
    prompt_parser.add_argument("--top-p", type=float, default=None)
    prompt_parser.add_argument("--frequency-penalty", type=float, default=None)
    prompt_parser.add_argument("--presence-penalty", type=float, default=None)
    prompt_parser.add_argument(
        "--stop", action="append", default=None, help="Stop sequence (repeatable)"
    )
    prompt_parser.add_argument(
        "--timeout", type=float, default=120.0, help="HTTP timeout in seconds (default: 120)"
    )
    prompt_parser.set_defaults(handler=_cmd_prompt)

    # backoff -------------------------------------------------------------
    backoff_parser = subparsers.add_parser(
        "backoff",
        help="Print retry delay and status per consecutive failure count",
    )
    backoff_parser.add_argument("--failures", type=int, default=DEFAULT_BACKOFF_ROWS)
    backoff_parser.add_argument(
        "--error-interval", type=int, default=DEFAULT_ERROR_INTERVAL_MS, help="Milliseconds"
    )
    backoff_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    backoff_parser.set_defaults(handler=_cmd_backoff)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the effective (redacted) configuration",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_reconcile(args: argparse.Namespace) -> int:
    config = _prepare(args)
    store = InMemoryEntityStore()
    outcome = asyncio.run(_reconcile_once(store, config))
    _emit_json(
        {
            "command": "reconcile",
            "outcome": _outcome_payload(outcome),
            "entities": store.snapshot(),
            "notices": list(store.notices),
        }
    )
    return 0 if outcome is not None and outcome.succeeded else 4


def _cmd_prompt(args: argparse.Namespace) -> int:
    config = _prepare(args)
    params: dict[str, object] = {
        "text": args.text,
        "max_tokens": args.max_tokens,
        "temperature": args.temperature,
        "top_p": args.top_p,
        "frequency_penalty": args.frequency_penalty,
        "presence_penalty": args.presence_penalty,
        "stop": args.stop,
    }
    reply = asyncio.run(
        _prompt_once(config, args.model_id, params, timeout_seconds=args.timeout)
    )
    if reply is None:
        raise CLIError("prompt rejected; see log for the offending parameter", exit_code=2)
    print(reply)
    return 0


def _cmd_backoff(args: argparse.Namespace) -> int:
    if args.failures < 0 or args.error_interval < 0:
        raise CLIError("--failures and --error-interval must be >= 0", exit_code=2)
    rows = backoff_table(args.failures, args.error_interval)
    if args.json:
        _emit_json({"command": "backoff", "rows": [row.to_dict() for row in rows]})
        return 0
    print(f"{'failures':>8}  {'delay_ms':>8}  status")
    for row in rows:
        print(f"{row.failures:>8}  {row.delay_ms:>8}  {row.status}")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _emit_json({"command": "config", "config": effective_config(config)})
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _reconcile_once(
    store: InMemoryEntityStore, config: ControllerConfig
) -> PassOutcome | None:
    async with HttpxTransport() as transport:
        controller = CompletionController(store, transport, config)
        outcome = controller.start()
        await controller.stop()
        return outcome


async def _prompt_once(
    config: ControllerConfig,
    model_id: str,
    params: Mapping[str, object],
    *,
    timeout_seconds: float,
) -> str | None:
    store = InMemoryEntityStore()
    async with HttpxTransport(timeout_seconds=timeout_seconds) as transport:
        controller = CompletionController(store, transport, config)
        outcome = controller.start()
        if outcome is None or not outcome.succeeded:
            reason = outcome.error if outcome is not None else "controller stopped"
            raise CLIError(f"reconciliation failed: {reason}", exit_code=4)
        if model_id not in controller.models:
            raise CLIError(f"unknown model id: {model_id!r}", exit_code=2)
        try:
            return await controller.perform_action(model_id, PROMPT_ACTION, params)
        except UnknownEntityError as exc:
            raise CLIError(str(exc), exit_code=2) from exc
        finally:
            await controller.stop()


def _prepare(args: argparse.Namespace) -> ControllerConfig:
    config = _load_effective_config(args)
    logging_section = config["logging"]
    configure_from_config(
        LoggingConfig(
            level="DEBUG" if args.verbose else logging_section["level"],
            json=logging_section["json"],
        )
    )
    return ControllerConfig.from_mapping(config)


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    return load_config(getattr(args, "config_path", None))


def _outcome_payload(outcome: PassOutcome | None) -> dict[str, object] | None:
    if outcome is None:
        return None
    return {
        "status": str(outcome.status),
        "delay_ms": outcome.delay_ms,
        "failures": outcome.failures,
        "error": outcome.error,
        "result": outcome.result.to_dict() if outcome.result is not None else None,
    }


def _emit_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


__all__ = ["CLIError", "build_parser", "run_cli"]
