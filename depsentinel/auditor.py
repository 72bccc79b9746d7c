"""Audit pipeline: walk -> extract -> manifest -> reconcile.

Usage::

    from depsentinel.auditor import audit

    report = audit("path/to/project", exclude=["myproject"], style="light")
    for verdict in report.verdicts:
        print(verdict.status.value, verdict.message)
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import structlog

from depsentinel.baseline import BaselineClassifier
from depsentinel.core.config import AuditConfig, load_config
from depsentinel.exceptions import ConfigError, ExtractionError, ManifestError
from depsentinel.extractors.base import UsageExtractor
from depsentinel.extractors.registry import ExtractorRegistry, create_default_registry
from depsentinel.manifest import load_manifest
from depsentinel.models import AuditReport, DeclaredManifest, Role, SourceFile, StructuralFailure
from depsentinel.names import dependency_name
from depsentinel.progress import PhaseListener, ProgressTracker
from depsentinel.reconcile import reconcile
from depsentinel.walker import collect_sources

log = structlog.get_logger("depsentinel.audit")


class Auditor:
    """Run one dependency audit over a project directory."""

    def __init__(
        self,
        config: AuditConfig,
        project_root: Path,
        registry: ExtractorRegistry | None = None,
        listeners: Iterable[PhaseListener] = (),
    ) -> None:
        self.config = config
        self.project_root = project_root
        self._registry = registry or create_default_registry()
        self.tracker = ProgressTracker(listeners=listeners)

    def build_extractor(self) -> UsageExtractor:
        descriptor = self._registry.get(self.config.style)
        if descriptor is None:
            raise ConfigError(f"unknown extraction style {self.config.style!r}")
        extractor = descriptor.factory(python=self.config.python, timeout=self.config.timeout)
        missing = extractor.check_prerequisites()
        if missing:
            log.warning("audit.prerequisites_missing", style=extractor.name, missing=missing)
        return extractor

    def _extract_all(self, extractor: UsageExtractor, sources: list[SourceFile]) -> list[set[str]]:
        paths = [s.path for s in sources]
        if self.config.jobs > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.config.jobs) as pool:
                # map() yields in submission order and re-raises the first error
                return list(pool.map(extractor.extract, paths))
        return [extractor.extract(p) for p in paths]

    def collect_usage(
        self,
        extractor: UsageExtractor,
        sources: list[SourceFile],
    ) -> tuple[Counter[str], Counter[str]]:
        """Return (runtime, build) dependency name -> number of files referencing it.

        Raises:
            ExtractionError: any file could not be analyzed.
        """
        exclusions = self.config.exclusions
        used: dict[Role, Counter[str]] = {Role.RUNTIME: Counter(), Role.BUILD: Counter()}
        for source, modules in zip(sources, self._extract_all(extractor, sources)):
            # Match exclusions before reduction so dotted namespaces take effect
            names = {
                dependency_name(m, self.config.namespace_packages)
                for m in modules
                if not exclusions.matches(m)
            }
            used[source.role].update(names)
        return used[Role.RUNTIME], used[Role.BUILD]

    def _load_manifest(self) -> DeclaredManifest | None:
        try:
            return load_manifest(self.project_root, self.config.manifest)
        except ManifestError as exc:
            log.error("audit.manifest_unavailable", error=str(exc))
            return None

    def run(self) -> AuditReport:
        report = AuditReport()

        with self.tracker.track("walk") as phase:
            sources = collect_sources(
                self.project_root, self.config.runtime_roots, self.config.build_roots
            )
            phase.detail = f"{len(sources)} source files"

        extractor = self.build_extractor()
        try:
            with self.tracker.track("extract") as phase:
                used_runtime, used_build = self.collect_usage(extractor, sources)
                phase.detail = (
                    f"{extractor.name}: {len(used_runtime)} runtime, {len(used_build)} build"
                )
        except ExtractionError as exc:
            log.error("audit.extraction_failed", path=exc.path, detail=exc.detail)
            report.failures.append(
                StructuralFailure(kind="extraction", message=str(exc), path=exc.path)
            )
            self.tracker.skip_remaining("extraction failed")
            report.phases = self.tracker.get_summary()
            return report

        with self.tracker.track("manifest") as phase:
            manifest = self._load_manifest()
            phase.detail = "loaded" if manifest is not None else "missing"

        with self.tracker.track("reconcile") as phase:
            report.verdicts = reconcile(
                used_runtime,
                used_build,
                manifest,
                self.config.exclusions,
                BaselineClassifier(self.config.baseline),
                manifest_name=self.config.manifest,
            )
            phase.detail = f"{len(report.verdicts)} verdicts"

        report.phases = self.tracker.get_summary()
        log.info(
            "audit.complete",
            verdicts=len(report.verdicts),
            failed=len(report.failed_verdicts),
            ok=report.ok,
        )
        return report


def audit(
    project_root: str | Path = ".",
    config_path: str | Path | None = None,
    **options: Any,
) -> AuditReport:
    """Load configuration for *project_root*, apply *options*, and run an audit.

    Raises:
        ConfigError: the configuration is invalid.
    """
    root = Path(project_root)
    config = load_config(
        root,
        config_path=Path(config_path) if config_path is not None else None,
        overrides=options,
    )
    return Auditor(config, root).run()
