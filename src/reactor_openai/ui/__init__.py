"""Command-line surface for reactor-openai."""

from reactor_openai.ui.cli import CLIError, build_parser, run_cli

__all__ = ["CLIError", "build_parser", "run_cli"]
