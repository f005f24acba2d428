"""
ccxpolicy test suite.

Tests are organized by layer:
    tests/unit/     Core engine, model, registry, host adapters (no I/O)
    tests/policy/   Declarative loader and explain output (fixture files)
    tests/cli/      Click commands via CliRunner

Run all tests:
    pytest

Run unit tests only:
    pytest tests/unit/
"""
