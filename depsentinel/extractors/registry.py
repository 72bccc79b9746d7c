"""Extractor registry: strategy discovery and style selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from depsentinel.extractors.base import UsageExtractor

log = structlog.get_logger("depsentinel.extract")

STYLE_ENV_VAR = "DEPSENTINEL_STYLE"
DEFAULT_STYLE = "heavy"


@dataclass
class ExtractorDescriptor:
    """Extraction strategy declaration."""

    name: str
    description: str
    precision_score: float  # 0.0-1.0
    speed_score: float  # 0.0-1.0 (higher = faster)
    factory: Callable[..., UsageExtractor]


class ExtractorRegistry:
    """Extraction strategy registration center."""

    def __init__(self) -> None:
        self._extractors: dict[str, ExtractorDescriptor] = {}

    def register(self, descriptor: ExtractorDescriptor) -> None:
        self._extractors[descriptor.name] = descriptor
        log.debug("registry.registered", style=descriptor.name)

    def get(self, name: str) -> ExtractorDescriptor | None:
        return self._extractors.get(name)

    def names(self) -> list[str]:
        return sorted(self._extractors)

    def list_all(self) -> list[ExtractorDescriptor]:
        """All strategies, most precise first."""
        return sorted(self._extractors.values(), key=lambda d: d.precision_score, reverse=True)


def create_default_registry() -> ExtractorRegistry:
    """Create registry with the light and heavy strategies registered."""
    from depsentinel.extractors.heavy import HeavyExtractor
    from depsentinel.extractors.light import LightExtractor

    registry = ExtractorRegistry()
    registry.register(
        ExtractorDescriptor(
            name="heavy",
            description="compile each file in a subprocess and report its imports",
            precision_score=0.95,
            speed_score=0.30,
            factory=HeavyExtractor,
        )
    )
    registry.register(
        ExtractorDescriptor(
            name="light",
            description="regex scan of import statements, documentation stripped",
            precision_score=0.70,
            speed_score=0.95,
            factory=lambda **_: LightExtractor(),
        )
    )
    return registry


def resolve_style(
    configured: str,
    env_value: str | None,
    registry: ExtractorRegistry,
) -> str:
    """Pick the effective style.

    The environment value wins over *configured*; an unknown environment
    value is ignored with a warning. *configured* is expected to be valid.
    """
    if env_value is None or env_value == "":
        return configured
    style = env_value.strip().lower()
    if registry.get(style) is None:
        log.warning(
            "style.unknown_override",
            env_var=STYLE_ENV_VAR,
            value=env_value,
            using=configured,
        )
        return configured
    if style != configured:
        log.info("style.overridden", env_var=STYLE_ENV_VAR, style=style, configured=configured)
    return style
