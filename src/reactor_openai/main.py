"""Executable CLI entrypoint for ``reactor_openai``."""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator, Sequence
from enum import IntEnum
from typing import Final

from reactor_openai.config.loader import ConfigLoadError
from reactor_openai.config.schema import ConfigValidationError
from reactor_openai.domain.errors import ControllerError


class ExitCode(IntEnum):
    """Process exit codes of the ``reactor-openai`` command."""

    SUCCESS = 0
    CONFIG_ERROR = 2
    PROVIDER_ERROR = 3
    INTERNAL_ERROR = 4

    @classmethod
    def for_exception(cls, exc: BaseException) -> ExitCode:
        """Classify ``exc`` by the first recognised error in its cause chain."""

        for item in _causes(exc):
            for error_types, code in _EXIT_CODE_RULES:
                if isinstance(item, error_types):
                    return code
        return cls.INTERNAL_ERROR


# Config problems include unreadable files; service problems are any ControllerError.
_EXIT_CODE_RULES: Final[tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...]] = (
    (
        (ConfigLoadError, ConfigValidationError, FileNotFoundError, NotADirectoryError),
        ExitCode.CONFIG_ERROR,
    ),
    ((ControllerError,), ExitCode.PROVIDER_ERROR),
)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and map every outcome onto an ``ExitCode``."""

    from reactor_openai.ui.cli import run_cli

    try:
        return _known_code(run_cli(argv))
    except SystemExit as exc:
        return _known_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - process boundary
        code = ExitCode.for_exception(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(str(exc).strip() or type(exc).__name__, file=sys.stderr)
        return int(code)


def _known_code(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and any(raw == code for code in ExitCode):
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


__all__ = ["ExitCode", "cli_entrypoint"]
