"""Resolver settings and the injected resolution context.

Settings come from, lowest precedence first:
1. Built-in defaults
2. User settings (~/.esa-resolver/settings.yaml)
3. Project settings (./.esa-resolver/settings.yaml)
4. Environment variables (ESA_RESOLVER_*)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field

from .dependency import FirstProviderSelector
from .dependency import ProviderSelector
from .identifiers import IdentifierSource
from .repository import ExternalRepository
from .repository import Repository

logger = logging.getLogger(__name__)

ENV_PREFIX = "ESA_RESOLVER_"


class ResolverSettings(BaseModel):
    """Validated resolver configuration."""

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".esa-resolver" / "data",
        description="Parent of the per-unit working directories",
    )
    max_depth: int = Field(default=16, ge=0, description="Maximum nesting depth of unit archives")
    log_path: str | None = Field(None, description="JSONL log file; logging is left alone when unset")
    log_level: str = Field(default="INFO", description="Root log level")


@dataclass
class SettingsPaths:
    """Standard locations of settings files."""

    user_settings: Path
    project_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        return cls(
            user_settings=Path.home() / ".esa-resolver" / "settings.yaml",
            project_settings=Path.cwd() / ".esa-resolver" / "settings.yaml",
        )


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, overlay wins."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            content = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Skipping malformed settings file {path}: {e}")
        return {}
    if not isinstance(content, dict):
        logger.warning(f"Skipping settings file {path}: top level is not a mapping")
        return {}
    return content


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides = {}
    for name in ResolverSettings.model_fields:
        value = env.get(ENV_PREFIX + name.upper())
        if value:
            overrides[name] = value
    return overrides


def load_settings(
    paths: SettingsPaths | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ResolverSettings:
    """Merge settings files, environment, and explicit overrides.

    Raises:
        pydantic.ValidationError: A merged value is invalid
    """
    paths = paths or SettingsPaths.default()
    env = os.environ if env is None else env

    merged: dict[str, Any] = {}
    for path in (paths.user_settings, paths.project_settings):
        merged = _deep_merge(merged, _read_yaml(path))
    merged = _deep_merge(merged, _env_overrides(env))
    merged = _deep_merge(merged, {k: v for k, v in overrides.items() if v is not None})

    return ResolverSettings.model_validate(merged)


@dataclass
class ResolverContext:
    """Collaborators shared by every unit constructed through it.

    One context per process is the normal arrangement; the identifier source
    it holds is what keeps unit identifiers unique.
    """

    settings: ResolverSettings = field(default_factory=ResolverSettings)
    identifiers: IdentifierSource = field(default_factory=IdentifierSource)
    external_repository: Repository = field(default_factory=ExternalRepository)
    selector: ProviderSelector = field(default_factory=FirstProviderSelector)

    @classmethod
    def from_settings(cls, settings: ResolverSettings | None = None, **kwargs: Any) -> ResolverContext:
        return cls(settings=settings or load_settings(), **kwargs)
