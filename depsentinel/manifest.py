"""Manifest loader: read declared runtime and build dependencies.

The manifest is a TOML document at a project-relative path::

    [required]
    requests = "2.31"
    structlog = ""

    [buildRequired]
    pytest = "7.0"
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog

from depsentinel.exceptions import ManifestError
from depsentinel.models import DeclaredManifest
from depsentinel.names import is_valid_module_name

log = structlog.get_logger("depsentinel.manifest")

DEFAULT_MANIFEST = "dependencies.toml"

REQUIRED_KEY = "required"
BUILD_REQUIRED_KEY = "buildRequired"

# Version strings that mean "any version"
_ANY_VERSION = {"", "0", "*"}


def _parse_section(data: dict[str, Any], key: str, source: str) -> dict[str, str | None]:
    section = data.get(key, {})
    if not isinstance(section, dict):
        raise ManifestError(f"{source}: [{key}] must be a table")

    declared: dict[str, str | None] = {}
    for name, version in section.items():
        if not is_valid_module_name(name):
            raise ManifestError(f"{source}: {name!r} in [{key}] is not a valid module name")
        if not isinstance(version, str):
            raise ManifestError(
                f"{source}: version for {name!r} in [{key}] must be a string, "
                f"got {type(version).__name__}"
            )
        version = version.strip()
        declared[name] = None if version in _ANY_VERSION else version
    return declared


def parse_manifest(content: str, source: str = DEFAULT_MANIFEST) -> DeclaredManifest:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(f"{source}: invalid TOML: {exc}") from exc

    unknown = sorted(set(data) - {REQUIRED_KEY, BUILD_REQUIRED_KEY})
    if unknown:
        log.debug("manifest.unknown_keys", source=source, keys=unknown)

    return DeclaredManifest(
        required=_parse_section(data, REQUIRED_KEY, source),
        build_required=_parse_section(data, BUILD_REQUIRED_KEY, source),
        source=source,
    )


def load_manifest(project_root: Path, manifest_path: str = DEFAULT_MANIFEST) -> DeclaredManifest:
    """Load the manifest at *manifest_path* relative to *project_root*.

    Raises:
        ManifestError: the file is absent, unreadable, or malformed.
    """
    path = project_root / manifest_path
    if not path.is_file():
        raise ManifestError(f"{manifest_path} not found in {project_root}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"{manifest_path} could not be read: {exc}") from exc

    manifest = parse_manifest(content, source=manifest_path)
    log.debug(
        "manifest.loaded",
        source=manifest_path,
        required=len(manifest.required),
        build_required=len(manifest.build_required),
    )
    return manifest
