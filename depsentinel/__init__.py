"""depsentinel: verify a project's declared dependencies match what its code imports."""

__version__ = "0.1.0"

from depsentinel.auditor import Auditor, audit
from depsentinel.baseline import BaselineClassifier
from depsentinel.core.config import AuditConfig, load_config
from depsentinel.exceptions import AuditError, ConfigError, ExtractionError, ManifestError
from depsentinel.manifest import load_manifest
from depsentinel.models import (
    AuditReport,
    DeclaredManifest,
    Reason,
    Role,
    SourceFile,
    Status,
    StructuralFailure,
    Verdict,
)
from depsentinel.names import ExclusionSpec
from depsentinel.reconcile import reconcile

__all__ = [
    "AuditConfig",
    "AuditError",
    "AuditReport",
    "Auditor",
    "BaselineClassifier",
    "ConfigError",
    "DeclaredManifest",
    "ExclusionSpec",
    "ExtractionError",
    "ManifestError",
    "Reason",
    "Role",
    "SourceFile",
    "Status",
    "StructuralFailure",
    "Verdict",
    "audit",
    "load_config",
    "load_manifest",
    "reconcile",
]
