"""
Runtime Configuration

Central configuration for commitment builds and artifact export.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# Artifact kinds the exporter knows how to write
ALL_EXPORT_FORMATS: tuple[str, ...] = ("json", "csv", "solidity", "typescript")


def parse_formats(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """
    Normalize an export format selection.

    Accepts a comma-separated string or a list. "all" selects every format.

    Raises:
        ValueError: If an unknown format is named
    """
    if isinstance(value, str):
        items = [v.strip().lower() for v in value.split(",") if v.strip()]
    else:
        items = [str(v).strip().lower() for v in value]

    if "all" in items:
        return list(ALL_EXPORT_FORMATS)

    unknown = sorted(set(items) - set(ALL_EXPORT_FORMATS))
    if unknown:
        raise ValueError(
            f"Unknown export format(s): {unknown}. "
            f"Choose from: {', '.join(ALL_EXPORT_FORMATS)}"
        )
    # Keep canonical order, drop repeats
    return [f for f in ALL_EXPORT_FORMATS if f in items]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class CommitmentConfig:
    """Configuration for tree building and the pre-export self-check."""
    workers: int = 1
    verify_proofs: bool = True
    deterministic_timestamps: bool = False
    fixed_generated_at: str = "1970-01-01T00:00:00.000Z"

    def __post_init__(self):
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if not self.verify_proofs:
            # The self-check is mandatory; there is no unverified publish mode
            raise ValueError("verify_proofs cannot be disabled")


@dataclass
class ExportConfig:
    """Configuration for artifact writers."""
    formats: list[str] = field(default_factory=lambda: list(ALL_EXPORT_FORMATS))
    solidity_library: str = "MerkleConstants"
    solidity_pragma: str = "^0.8.20"

    def __post_init__(self):
        self.formats = parse_formats(self.formats)
        if not self.solidity_library.isidentifier():
            raise ValueError(
                f"solidity_library must be a valid identifier, got {self.solidity_library!r}"
            )


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for urimerkle.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    commitment: CommitmentConfig = field(default_factory=CommitmentConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - URIMERKLE_WORKERS: Leaf encoding worker threads
        - URIMERKLE_DETERMINISTIC_TIMESTAMPS: Use fixed generatedAt (true/false)
        - URIMERKLE_EXPORT_FORMATS: Comma-separated formats, or "all"
        - URIMERKLE_SOLIDITY_LIBRARY: Solidity library name
        """
        overrides: dict[str, Any] = {}

        # Commitment settings
        if os.getenv("URIMERKLE_WORKERS"):
            overrides.setdefault("commitment", {})["workers"] = int(
                os.getenv("URIMERKLE_WORKERS", "1")
            )
        if os.getenv("URIMERKLE_DETERMINISTIC_TIMESTAMPS"):
            overrides.setdefault("commitment", {})["deterministic_timestamps"] = _env_bool(
                "URIMERKLE_DETERMINISTIC_TIMESTAMPS"
            )

        # Export settings
        if os.getenv("URIMERKLE_EXPORT_FORMATS"):
            overrides.setdefault("export", {})["formats"] = parse_formats(
                os.getenv("URIMERKLE_EXPORT_FORMATS", "all")
            )
        if os.getenv("URIMERKLE_SOLIDITY_LIBRARY"):
            overrides.setdefault("export", {})["solidity_library"] = os.getenv(
                "URIMERKLE_SOLIDITY_LIBRARY"
            )

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        overrides = cls._get_env_overrides()
        return cls.from_dict(overrides)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        commitment_data = data.get("commitment", {})
        export_data = data.get("export", {})

        commitment = CommitmentConfig(**commitment_data) if commitment_data else CommitmentConfig()
        export = ExportConfig(**export_data) if export_data else ExportConfig()

        return cls(
            commitment=commitment,
            export=export,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        if "commitment" in overrides:
            for key, value in overrides["commitment"].items():
                setattr(new_config.commitment, key, value)

        if "export" in overrides:
            for key, value in overrides["export"].items():
                setattr(new_config.export, key, value)

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "commitment": {
                "workers": self.commitment.workers,
                "verify_proofs": self.commitment.verify_proofs,
                "deterministic_timestamps": self.commitment.deterministic_timestamps,
                "fixed_generated_at": self.commitment.fixed_generated_at,
            },
            "export": {
                "formats": list(self.export.formats),
                "solidity_library": self.export.solidity_library,
                "solidity_pragma": self.export.solidity_pragma,
            },
            "extra": self.extra,
        }
