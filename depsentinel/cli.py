"""CLI entry point: depsentinel.

Subcommands:
    depsentinel check [PROJECT]        # Audit a project, TAP output (or --json)
    depsentinel extract FILE           # Modules one file references
    depsentinel styles                 # List extraction strategies

Exit codes: 0 all verdicts passed, 1 any failure, 2 invalid configuration.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from depsentinel.auditor import Auditor
from depsentinel.core.config import load_config
from depsentinel.core.logging import setup_logging
from depsentinel.exceptions import ConfigError, ExtractionError
from depsentinel.extractors.registry import DEFAULT_STYLE, create_default_registry
from depsentinel.models import AuditReport
from depsentinel.progress import PhaseProgress

EXIT_FAILED = 1
EXIT_CONFIG = 2


def format_tap(report: AuditReport) -> list[str]:
    """Render a report as TAP lines."""
    lines: list[str] = []
    for failure in report.failures:
        lines.append(f"Bail out! {failure.message}")
    if report.failures:
        return lines
    for number, verdict in enumerate(report.verdicts, start=1):
        prefix = "ok" if verdict.passed else "not ok"
        lines.append(f"{prefix} {number} - {verdict.message}")
    lines.append(f"1..{len(report.verdicts)}")
    return lines


def echo_phase(phase: PhaseProgress) -> None:
    """Print a finished phase to stderr, keeping stdout for the report."""
    if not phase.done:
        return
    line = f"# {phase.phase}: {phase.status}"
    if phase.duration is not None:
        line += f" in {phase.duration:.3f}s"
    if phase.error or phase.detail:
        line += f" ({phase.error or phase.detail})"
    click.echo(line, err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging and phase progress")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """depsentinel: check declared dependencies against what the code imports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else None)


@main.command("check")
@click.argument("project", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--style", default=None, help="Extraction style: light | heavy")
@click.option("--exclude", multiple=True, help="Namespace to ignore (repeatable)")
@click.option("--baseline", default=None, help="Oldest supported Python release, e.g. 3.9")
@click.option("--manifest", default=None, help="Manifest path relative to PROJECT")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Config file (default: depsentinel.toml or [tool.depsentinel])")
@click.option("--jobs", default=None, type=int, help="Files to extract in parallel")
@click.option("--timeout", default=None, type=float, help="Per-file timeout for heavy style")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check(
    ctx: click.Context,
    project: str,
    style: str | None,
    exclude: tuple[str, ...],
    baseline: str | None,
    manifest: str | None,
    config_path: str | None,
    jobs: int | None,
    timeout: float | None,
    as_json: bool,
) -> None:
    """Audit PROJECT's manifest against the modules its sources import."""
    root = Path(project)
    overrides = {
        "style": style,
        "exclude": list(exclude) or None,
        "baseline": baseline,
        "manifest": manifest,
        "jobs": jobs,
        "timeout": timeout,
    }
    try:
        config = load_config(
            root,
            config_path=Path(config_path) if config_path else None,
            overrides=overrides,
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG)

    listeners = [echo_phase] if ctx.obj.get("verbose") else []
    report = Auditor(config, root, listeners=listeners).run()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for line in format_tap(report):
            click.echo(line)

    if not report.ok:
        sys.exit(EXIT_FAILED)


@main.command("extract")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--style", default=DEFAULT_STYLE, help="Extraction style: light | heavy")
def extract(file: str, style: str) -> None:
    """List the modules FILE references, one per line."""
    descriptor = create_default_registry().get(style)
    if descriptor is None:
        click.echo(f"Error: unknown extraction style {style!r}", err=True)
        sys.exit(EXIT_CONFIG)
    try:
        modules = descriptor.factory().extract(Path(file))
    except ExtractionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)
    for module in sorted(modules):
        click.echo(module)


@main.command("styles")
def styles() -> None:
    """List available extraction styles."""
    for d in create_default_registry().list_all():
        default = " (default)" if d.name == DEFAULT_STYLE else ""
        click.echo(
            f"{d.name}{default}: {d.description} "
            f"[precision={d.precision_score:.2f}, speed={d.speed_score:.2f}]"
        )


if __name__ == "__main__":
    main()
