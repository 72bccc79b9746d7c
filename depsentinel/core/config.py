"""Audit configuration: defaults, config-file discovery, and validation.

Options are read from ``depsentinel.toml`` or the ``[tool.depsentinel]``
table of ``pyproject.toml`` (first found wins), then CLI overrides, then the
``DEPSENTINEL_STYLE`` environment variable for the extraction style.
"""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from depsentinel.baseline import DEFAULT_BASELINE
from depsentinel.exceptions import ConfigError
from depsentinel.extractors.registry import (
    DEFAULT_STYLE,
    STYLE_ENV_VAR,
    create_default_registry,
    resolve_style,
)
from depsentinel.manifest import DEFAULT_MANIFEST
from depsentinel.names import ExclusionSpec, is_valid_module_name

log = structlog.get_logger("depsentinel.config")

CONFIG_FILE = "depsentinel.toml"
PYPROJECT_FILE = "pyproject.toml"
TOOL_KEY = "depsentinel"

_RELEASE_RE = re.compile(r"^\d+(\.\d+)*$")


class AuditConfig(BaseModel):
    """Validated audit options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    exclude: list[str] = Field(default_factory=list)
    style: str = DEFAULT_STYLE
    baseline: str = DEFAULT_BASELINE
    manifest: str = DEFAULT_MANIFEST
    runtime_roots: list[str] = Field(default_factory=lambda: ["lib", "bin", "src"])
    build_roots: list[str] = Field(default_factory=lambda: ["t", "tests"])
    namespace_packages: list[str] = Field(default_factory=list)
    python: str = Field(default_factory=lambda: sys.executable)
    timeout: float = Field(default=60.0, gt=0)
    jobs: int = Field(default=1, ge=1)

    @field_validator("exclude", "namespace_packages")
    @classmethod
    def _check_namespaces(cls, v: list[str]) -> list[str]:
        for namespace in v:
            if not is_valid_module_name(namespace):
                raise ValueError(f"{namespace!r} is not a valid namespace")
        return v

    @field_validator("style", mode="before")
    @classmethod
    def _check_style(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        style = v.strip().lower()
        known = create_default_registry().names()
        if style not in known:
            raise ValueError(f"unknown extraction style {v!r} (expected one of {known})")
        return style

    @field_validator("baseline")
    @classmethod
    def _check_baseline(cls, v: str) -> str:
        if not _RELEASE_RE.match(v):
            raise ValueError(f"baseline must be a release number like '3.9', got {v!r}")
        return v

    @model_validator(mode="after")
    def _check_roots_disjoint(self) -> AuditConfig:
        overlap = sorted(set(self.runtime_roots) & set(self.build_roots))
        if overlap:
            raise ValueError(f"runtime_roots and build_roots overlap: {overlap}")
        return self

    @property
    def exclusions(self) -> ExclusionSpec:
        return ExclusionSpec.from_namespaces(self.exclude)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"could not read {path}: {exc}") from exc


def find_config_file(project_root: Path) -> Path | None:
    """Return the first config file present under *project_root*."""
    candidate = project_root / CONFIG_FILE
    if candidate.is_file():
        return candidate
    pyproject = project_root / PYPROJECT_FILE
    if pyproject.is_file() and TOOL_KEY in _read_toml(pyproject).get("tool", {}):
        return pyproject
    return None


def _read_options(path: Path) -> dict[str, Any]:
    data = _read_toml(path)
    if path.name == PYPROJECT_FILE:
        data = data.get("tool", {}).get(TOOL_KEY, {})
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: [tool.{TOOL_KEY}] must be a table")
    return data


def load_config(
    project_root: Path,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AuditConfig:
    """Build the effective configuration.

    Raises:
        ConfigError: any option is invalid. Raised before any scanning.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"config file not found: {config_path}")
        found: Path | None = config_path
    else:
        found = find_config_file(project_root)

    data: dict[str, Any] = _read_options(found) if found else {}
    if found:
        log.debug("config.loaded", path=str(found))
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = AuditConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    env = os.environ if environ is None else environ
    style = resolve_style(config.style, env.get(STYLE_ENV_VAR), create_default_registry())
    if style != config.style:
        config = config.model_copy(update={"style": style})
    return config
