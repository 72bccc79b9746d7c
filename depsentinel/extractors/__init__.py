"""Usage extraction strategies."""

from depsentinel.extractors.base import UsageExtractor
from depsentinel.extractors.heavy import HeavyExtractor
from depsentinel.extractors.light import LightExtractor
from depsentinel.extractors.registry import (
    ExtractorDescriptor,
    ExtractorRegistry,
    create_default_registry,
    resolve_style,
)

__all__ = [
    "ExtractorDescriptor",
    "ExtractorRegistry",
    "HeavyExtractor",
    "LightExtractor",
    "UsageExtractor",
    "create_default_registry",
    "resolve_style",
]
