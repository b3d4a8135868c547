"""
Runtime Configuration Module

Provides configuration loading and management for urimerkle.
"""

from .runtime import (
    ALL_EXPORT_FORMATS,
    CommitmentConfig,
    ExportConfig,
    RuntimeConfig,
    parse_formats,
)

__all__ = [
    "ALL_EXPORT_FORMATS",
    "CommitmentConfig",
    "ExportConfig",
    "RuntimeConfig",
    "parse_formats",
]
