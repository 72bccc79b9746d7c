"""Module name grammar, dependency-name reduction, and namespace exclusions."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from depsentinel.exceptions import ConfigError

DELIMITER = "."

# One or more word-character segments joined by the delimiter.
_MODULE_NAME_RE = re.compile(r"^\w+(?:\.\w+)*$")


def is_valid_module_name(name: str) -> bool:
    return bool(_MODULE_NAME_RE.match(name))


def dependency_name(module: str, namespace_packages: Iterable[str] = ()) -> str:
    """Reduce a referenced module to the name a manifest declares it under.

    ``requests.adapters`` -> ``requests``. When the top-level segment is a
    namespace package (``google``), the first two segments are kept
    (``google.protobuf``).
    """
    parts = module.split(DELIMITER)
    if len(parts) > 1 and parts[0] in set(namespace_packages):
        return DELIMITER.join(parts[:2])
    return parts[0]


@dataclass(frozen=True)
class ExclusionSpec:
    """Namespaces whose modules never produce verdicts."""

    namespaces: tuple[str, ...] = ()

    @classmethod
    def from_namespaces(cls, namespaces: Iterable[str]) -> ExclusionSpec:
        validated: list[str] = []
        for namespace in namespaces:
            if not isinstance(namespace, str) or not is_valid_module_name(namespace):
                raise ConfigError(f"{namespace!r} is not a valid namespace")
            validated.append(namespace)
        return cls(namespaces=tuple(validated))

    def matches(self, name: str) -> bool:
        return any(
            name == prefix or name.startswith(prefix + DELIMITER) for prefix in self.namespaces
        )

    def __bool__(self) -> bool:
        return bool(self.namespaces)
