# deal_scout/__init__.py
"""
DealScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point; `deal_scout.cli` itself stays the module
from deal_scout.cli import cli as main_cli  # noqa: E402
