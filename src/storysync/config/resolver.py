"""Turn the configuration sources into one validated :class:`SyncConfig`.

Sources, lowest precedence first: built-in defaults, the YAML file, the
environment, and command-line options. The environment is read in two forms:
the flat names older deployments put in their ``.env`` files
(``SOLR_HOST``, ``STORYBLOK_ACCESS_TOKEN`` ...) and the nested
``STORYSYNC__SECTION__KEY`` form, which wins when both are set.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import SyncConfig

ENV_PREFIX = "STORYSYNC__"

LEGACY_ENV_KEYS: dict[str, tuple[str, str]] = {
    "STORYBLOK_ACCESS_TOKEN": ("storyblok", "access_token"),
    "SOLR_HOST": ("solr", "host"),
    "SOLR_PORT": ("solr", "port"),
    "SOLR_PATH": ("solr", "path"),
    "SOLR_USER": ("solr", "user"),
    "SOLR_PASS": ("solr", "password"),
    "SOLR_CORE": ("solr", "core"),
}


def resolve_with_precedence(
    *,
    defaults: SyncConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> SyncConfig:
    """Merge configuration sources; later sources win over earlier ones.

    Args:
        defaults: Baseline configuration.
        file_overrides: Nested values read from the configuration file.
        env_overrides: Nested values, usually from :func:`environment_overrides`.
        cli_overrides: Command-line values keyed by dotted path such as
            ``storyblok.per_page``. ``None`` values are ignored so unset
            options do not mask lower sources.

    Returns:
        SyncConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    for layer in (file_overrides, env_overrides, dotted_overrides(cli_overrides or {})):
        if layer:
            merged = _deep_merge(merged, layer)

    try:
        return SyncConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def environment_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect configuration overrides from environment variables.

    Legacy names are taken verbatim; ``STORYSYNC__`` values are parsed as YAML
    so lists and numbers can be expressed.
    """
    overrides: dict[str, Any] = {}

    for key, path in LEGACY_ENV_KEYS.items():
        raw_value = env.get(key)
        if raw_value:
            assign_path(overrides, path, raw_value)

    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_path(overrides, path, value)

    return overrides


def dotted_overrides(values: Mapping[str, Any]) -> dict[str, Any]:
    """Expand ``{"solr.core": "x"}`` style keys into a nested mapping."""
    nested: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        path = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not path:
            raise ConfigError(f"Invalid override key {key!r}.")
        assign_path(nested, path, value)
    return nested


def assign_path(target: dict[str, Any], path: Sequence[str], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating sections as needed.

    Raises:
        ConfigError: If a segment along the path already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot set {'.'.join(path)}: '{segment}' is not a configuration section."
            )
        node = existing
    node[path[-1]] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "LEGACY_ENV_KEYS",
    "assign_path",
    "dotted_overrides",
    "environment_overrides",
    "resolve_with_precedence",
]
