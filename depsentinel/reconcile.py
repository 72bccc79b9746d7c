"""Reconciliation engine: compare used modules against the declared manifest.

Verdicts are emitted in a fixed order so output is deterministic and
diff-friendly:

    1. runtime pass         (used by runtime sources, sorted)
    2. build pass           (used only by build/test sources, sorted)
    3. required residual    (declared required, never consumed)
    4. buildRequired residual
    5. already-bundled declarations (required, then buildRequired)

Inputs are never mutated; consumed and residual sets are computed
explicitly.
"""

from __future__ import annotations

from collections.abc import Mapping

from depsentinel.baseline import BaselineClassifier
from depsentinel.manifest import BUILD_REQUIRED_KEY, DEFAULT_MANIFEST, REQUIRED_KEY
from depsentinel.models import DeclaredManifest, Reason, Role, Status, Verdict
from depsentinel.names import ExclusionSpec

_ROLE_KEY = {Role.RUNTIME: REQUIRED_KEY, Role.BUILD: BUILD_REQUIRED_KEY}


def split_build_usage(
    used_runtime: Mapping[str, int],
    used_build: Mapping[str, int],
) -> dict[str, int]:
    """Drop build-only usage already covered by a runtime dependency."""
    return {name: count for name, count in used_build.items() if name not in used_runtime}


def _role_pass(
    role: Role,
    used: Mapping[str, int],
    declared: Mapping[str, str | None],
    exclusions: ExclusionSpec,
    classifier: BaselineClassifier,
    manifest_name: str,
) -> tuple[list[Verdict], set[str]]:
    """Assert every used module of one role; return verdicts and consumed names."""
    verdicts: list[Verdict] = []
    consumed: set[str] = set()
    key = _ROLE_KEY[role]
    for name in sorted(used):
        if classifier.is_bundled(name):
            continue
        if exclusions.matches(name):
            continue
        if name in declared:
            verdicts.append(
                Verdict(
                    status=Status.PASS,
                    reason=Reason.DECLARED,
                    message=f"{name} in {manifest_name} ({key})",
                    module=name,
                    role=role,
                )
            )
        else:
            verdicts.append(
                Verdict(
                    status=Status.FAIL,
                    reason=Reason.UNDECLARED,
                    message=f"requires {name} in {manifest_name} ({key})",
                    module=name,
                    role=role,
                )
            )
        consumed.add(name)
    return verdicts, consumed


def _residual_pass(
    role: Role,
    declared: Mapping[str, str | None],
    consumed: set[str],
    exclusions: ExclusionSpec,
) -> list[Verdict]:
    kind = "runtime" if role is Role.RUNTIME else "build"
    return [
        Verdict(
            status=Status.FAIL,
            reason=Reason.UNUSED,
            message=f"{name} is not a {kind} dependency",
            module=name,
            role=role,
        )
        for name in sorted(set(declared) - consumed)
        if not exclusions.matches(name)
    ]


def _bundled_pass(
    role: Role,
    declared: Mapping[str, str | None],
    exclusions: ExclusionSpec,
    classifier: BaselineClassifier,
) -> list[Verdict]:
    verdicts: list[Verdict] = []
    for name in sorted(declared):
        if exclusions.matches(name):
            continue
        release = classifier.bundled_since(name, declared[name])
        if release is None:
            continue
        verdicts.append(
            Verdict(
                status=Status.FAIL,
                reason=Reason.ALREADY_BUNDLED,
                message=(
                    f"{name} is already bundled with Python {release} "
                    f"(baseline {classifier.baseline})"
                ),
                module=name,
                role=role,
            )
        )
    return verdicts


def reconcile(
    used_runtime: Mapping[str, int],
    used_build: Mapping[str, int],
    manifest: DeclaredManifest | None,
    exclusions: ExclusionSpec,
    classifier: BaselineClassifier,
    manifest_name: str = DEFAULT_MANIFEST,
) -> list[Verdict]:
    """Produce the ordered verdict sequence for one audit run.

    Args:
        used_runtime: dependency name -> reference count, runtime sources.
        used_build: dependency name -> reference count, build/test sources.
        manifest: declared dependencies, or None if none could be loaded.
        exclusions: namespaces that never produce verdicts.
        classifier: baseline runtime classifier.
        manifest_name: manifest path used in verdict messages.
    """
    if manifest is None:
        return [
            Verdict(
                status=Status.FAIL,
                reason=Reason.MANIFEST_MISSING,
                message=f"{manifest_name} is missing or unreadable",
            )
        ]

    build_only = split_build_usage(used_runtime, used_build)

    runtime_verdicts, runtime_consumed = _role_pass(
        Role.RUNTIME, used_runtime, manifest.required, exclusions, classifier, manifest_name
    )
    build_verdicts, build_consumed = _role_pass(
        Role.BUILD, build_only, manifest.build_required, exclusions, classifier, manifest_name
    )

    return (
        runtime_verdicts
        + build_verdicts
        + _residual_pass(Role.RUNTIME, manifest.required, runtime_consumed, exclusions)
        + _residual_pass(Role.BUILD, manifest.build_required, build_consumed, exclusions)
        + _bundled_pass(Role.RUNTIME, manifest.required, exclusions, classifier)
        + _bundled_pass(Role.BUILD, manifest.build_required, exclusions, classifier)
    )
