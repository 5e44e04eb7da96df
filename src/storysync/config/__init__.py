"""Configuration management for storysync."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import SyncConfig
from .resolver import (
    ENV_PREFIX,
    LEGACY_ENV_KEYS,
    assign_path,
    dotted_overrides,
    environment_overrides,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.storysync/config.yaml")
_CONFIG_HEADER = (
    "# storysync configuration file\n"
    "# Connection settings may also come from STORYSYNC__SECTION__KEY or the\n"
    "# SOLR_* / STORYBLOK_ACCESS_TOKEN environment variables.\n"
)

_REQUIRED_CONNECTION_FIELDS = (
    ("storyblok", "access_token"),
    ("solr", "host"),
    ("solr", "core"),
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve the effective config.

    Args:
        config_path: File location; defaults to ``~/.storysync/config.yaml``.
        env: Environment mapping; defaults to ``os.environ``.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> SyncConfig:
        """Resolve the effective configuration.

        Args:
            cli_overrides: Dotted-path values from command-line options.
            include_env: Whether environment variables participate.
            ensure_file: Create the default file first when it is missing.
            env_overrides: Environment mapping to use instead of the manager's.

        Returns:
            SyncConfig: Validated configuration.

        Raises:
            ConfigError: If the file is unreadable or a value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer = None
        if include_env:
            env_layer = environment_overrides(
                env_overrides if env_overrides is not None else self._env
            )

        return resolve_with_precedence(
            defaults=SyncConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the configuration file, or ``{}``."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: SyncConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to the file with a header and timestamp."""
        data = config.model_dump(mode="python") if isinstance(config, SyncConfig) else dict(config)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n"
            + yaml.safe_dump(data, sort_keys=False),
            encoding="utf-8",
        )

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self.save(SyncConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


def require_connection_settings(config: SyncConfig) -> SyncConfig:
    """Ensure the settings needed to reach Storyblok and Solr are present.

    Args:
        config: Resolved configuration.

    Returns:
        SyncConfig: The same configuration, for chaining.

    Raises:
        ConfigError: If any required connection field is empty.
    """
    missing = [
        f"{section}.{field}"
        for section, field in _REQUIRED_CONNECTION_FIELDS
        if not getattr(getattr(config, section), field)
    ]
    if missing:
        raise ConfigError(f"Missing required configuration values: {', '.join(missing)}.")
    return config


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "LEGACY_ENV_KEYS",
    "SyncConfig",
    "assign_path",
    "dotted_overrides",
    "environment_overrides",
    "require_connection_settings",
    "resolve_with_precedence",
]
