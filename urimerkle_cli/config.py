"""
Module 09C - CLI Configuration

Configuration management for the urimerkle CLI.
Supports environment variables and configuration files (JSON or YAML).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.config.runtime import (
    ALL_EXPORT_FORMATS,
    RuntimeConfig,
    parse_formats,
)


# Environment variable prefix
ENV_PREFIX = "URIMERKLE_"


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Build settings
    output_dir: str = "./merkle"
    workers: int = 1
    formats: list[str] = field(default_factory=lambda: list(ALL_EXPORT_FORMATS))
    solidity_library: str = "MerkleConstants"
    deterministic_timestamps: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    def to_runtime_config(self) -> RuntimeConfig:
        """Build the library-level RuntimeConfig these settings map onto."""
        return RuntimeConfig.from_dict({
            "commitment": {
                "workers": self.workers,
                "deterministic_timestamps": self.deterministic_timestamps,
            },
            "export": {
                "formats": list(self.formats),
                "solidity_library": self.solidity_library,
            },
        })

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_dir": self.output_dir,
            "workers": self.workers,
            "formats": list(self.formats),
            "solidity_library": self.solidity_library,
            "deterministic_timestamps": self.deterministic_timestamps,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def load_config_from_env() -> CLIConfig:
    """Load configuration from environment variables."""
    config = CLIConfig()

    # Build settings
    if os.getenv(f"{ENV_PREFIX}OUTPUT_DIR"):
        config.output_dir = os.getenv(f"{ENV_PREFIX}OUTPUT_DIR", config.output_dir)
    if os.getenv(f"{ENV_PREFIX}WORKERS"):
        config.workers = int(os.getenv(f"{ENV_PREFIX}WORKERS", "1"))
    if os.getenv(f"{ENV_PREFIX}EXPORT_FORMATS"):
        config.formats = parse_formats(os.getenv(f"{ENV_PREFIX}EXPORT_FORMATS", "all"))
    if os.getenv(f"{ENV_PREFIX}SOLIDITY_LIBRARY"):
        config.solidity_library = os.getenv(f"{ENV_PREFIX}SOLIDITY_LIBRARY", config.solidity_library)
    if os.getenv(f"{ENV_PREFIX}DETERMINISTIC_TIMESTAMPS"):
        config.deterministic_timestamps = _env_bool(f"{ENV_PREFIX}DETERMINISTIC_TIMESTAMPS")

    # Logging
    config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
    config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    return config


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON or YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    config = CLIConfig()

    # Build settings
    config.output_dir = data.get("output_dir", config.output_dir)
    try:
        config.workers = int(data.get("workers", config.workers))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid workers value in {path}: {data.get('workers')!r}") from e
    if "formats" in data:
        config.formats = parse_formats(data["formats"])
    config.solidity_library = data.get("solidity_library", config.solidity_library)
    config.deterministic_timestamps = bool(
        data.get("deterministic_timestamps", config.deterministic_timestamps)
    )

    # Logging
    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)

    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    # Start with defaults
    config = CLIConfig()

    # Load from file if provided
    if config_path and config_path.exists():
        config = load_config_from_file(config_path)

    # Check for default config locations
    default_paths = [
        Path.cwd() / "urimerkle.json",
        Path.cwd() / ".urimerkle.json",
        Path.home() / ".config" / "urimerkle" / "config.json",
    ]

    if config_path is None:
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    # Override with environment variables
    env_config = load_config_from_env()

    # Merge env into config (env takes precedence)
    if os.getenv(f"{ENV_PREFIX}OUTPUT_DIR"):
        config.output_dir = env_config.output_dir
    if os.getenv(f"{ENV_PREFIX}WORKERS"):
        config.workers = env_config.workers
    if os.getenv(f"{ENV_PREFIX}EXPORT_FORMATS"):
        config.formats = env_config.formats
    if os.getenv(f"{ENV_PREFIX}SOLIDITY_LIBRARY"):
        config.solidity_library = env_config.solidity_library
    if os.getenv(f"{ENV_PREFIX}DETERMINISTIC_TIMESTAMPS"):
        config.deterministic_timestamps = env_config.deterministic_timestamps
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = env_config.log_level
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = env_config.log_file

    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "output_dir": "./merkle",
  "workers": 4,
  "formats": ["json", "csv", "solidity", "typescript"],
  "solidity_library": "MerkleConstants",
  "deterministic_timestamps": false,
  "log_level": "INFO",
  "log_file": null
}
"""
