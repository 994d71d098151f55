"""Module entrypoint for ``python -m reactor_openai``."""

from __future__ import annotations

from reactor_openai.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
