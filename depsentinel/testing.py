"""pytest helper: fail a project's own test suite on dependency drift.

Usage, in ``tests/test_dependencies.py``::

    from depsentinel.testing import assert_dependencies

    def test_dependencies():
        assert_dependencies(".", exclude=["myproject"])
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from depsentinel.auditor import audit
from depsentinel.models import AuditReport


def format_failures(report: AuditReport) -> str:
    lines = [f.message for f in report.failures]
    lines.extend(v.message for v in report.failed_verdicts)
    return "\n".join(f"  - {line}" for line in lines)


def assert_dependencies(
    project_root: str | Path = ".",
    config_path: str | Path | None = None,
    **options: Any,
) -> AuditReport:
    """Audit *project_root* and raise ``AssertionError`` listing every problem.

    Returns the report when everything passed.
    """
    report = audit(project_root, config_path=config_path, **options)
    if not report.ok:
        problems = len(report.failures) + len(report.failed_verdicts)
        raise AssertionError(
            f"{problems} dependency problem(s) in {project_root}:\n{format_failures(report)}"
        )
    return report
