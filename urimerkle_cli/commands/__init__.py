"""
CLI command modules.
"""

from urimerkle_cli.commands import build, prove, verify

__all__ = ["build", "prove", "verify"]
