"""Data models shared by the walker, extractors, and reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class Role(Enum):
    """Which root set a source file was discovered under."""

    RUNTIME = "runtime"
    BUILD = "build"


class Status(Enum):
    PASS = "pass"
    FAIL = "fail"


class Reason(Enum):
    """Why a verdict was emitted."""

    DECLARED = "declared"  # used and declared for its role
    UNDECLARED = "undeclared"  # used but missing from the manifest
    UNUSED = "unused"  # declared but never used
    ALREADY_BUNDLED = "already_bundled"  # declared but shipped with the stdlib
    MANIFEST_MISSING = "manifest_missing"  # nothing could be reconciled


@dataclass(frozen=True)
class SourceFile:
    """A candidate source file plus the role of the root it was found under."""

    path: Path
    role: Role


@dataclass
class DeclaredManifest:
    """Declared dependencies: module name -> minimum version (None = any)."""

    required: dict[str, str | None] = field(default_factory=dict)
    build_required: dict[str, str | None] = field(default_factory=dict)
    source: str = ""


@dataclass(frozen=True)
class Verdict:
    """One reconciliation outcome for one module/role pair."""

    status: Status
    reason: Reason
    message: str
    module: str | None = None
    role: Role | None = None

    @property
    def passed(self) -> bool:
        return self.status is Status.PASS

    @property
    def is_structural(self) -> bool:
        return self.reason is Reason.MANIFEST_MISSING

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason.value,
            "module": self.module,
            "role": self.role.value if self.role else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class StructuralFailure:
    """A failure that aborted the run before any verdict could be produced."""

    kind: str  # "extraction"
    message: str
    path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "path": self.path}


@dataclass
class AuditReport:
    """Everything one audit run produced, in emission order."""

    verdicts: list[Verdict] = field(default_factory=list)
    failures: list[StructuralFailure] = field(default_factory=list)
    phases: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures and all(v.passed for v in self.verdicts)

    @property
    def failed_verdicts(self) -> list[Verdict]:
        return [v for v in self.verdicts if not v.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "verdicts": [v.to_dict() for v in self.verdicts],
            "failures": [f.to_dict() for f in self.failures],
            "phases": self.phases,
        }
