"""Custom exceptions for depsentinel."""


class AuditError(Exception):
    """Base exception for all audit errors."""


class ConfigError(AuditError):
    """Raised when the audit configuration is invalid. Fatal before any scanning."""


class ManifestError(AuditError):
    """Raised when the dependency manifest is missing or unreadable."""


class ExtractionError(AuditError):
    """Raised when a source file cannot be analyzed by an extraction strategy."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Could not analyze {path}: {detail}")
