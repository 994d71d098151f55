"""Cross-module tests that exercise the CLI in-process; no network access."""
