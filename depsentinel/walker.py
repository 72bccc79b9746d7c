"""Tree walker: enumerate candidate source files under the runtime and build roots."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from depsentinel.models import Role, SourceFile

log = structlog.get_logger("depsentinel.walker")

# Never descended into
_SKIP_DIRS = {
    ".git",
    ".svn",
    ".hg",
    ".bzr",
    "CVS",
    "_darcs",
    "__pycache__",
}

_BACKUP_SUFFIX = "~"
_DOC_SUFFIXES = (".pod", ".rst", ".md")
_SOURCE_SUFFIXES = {".py", ".pyw"}


def walk(project_root: Path, roots: Iterable[str]) -> list[Path]:
    """Return every regular file beneath *roots*, sorted by path.

    Roots are resolved against *project_root*; missing roots are skipped.
    """
    files: list[Path] = []
    for root in roots:
        base = project_root / root
        if not base.is_dir():
            log.debug("walker.root_missing", root=root)
            continue
        for dirpath, dirnames, filenames in os.walk(base):
            # Prune in place so skipped directories are never entered
            dirnames[:] = [d for d in dirnames if d not in _SKIP_DIRS]
            for filename in filenames:
                if filename.endswith(_BACKUP_SUFFIX) or filename.endswith(_DOC_SUFFIXES):
                    continue
                path = Path(dirpath) / filename
                if not path.is_file():
                    continue
                files.append(path)
    return sorted(files)


def is_python_source(path: Path) -> bool:
    """True for ``.py``/``.pyw`` files and extensionless python scripts."""
    if path.suffix.lower() in _SOURCE_SUFFIXES:
        return True
    if path.suffix:
        return False
    try:
        with path.open("rb") as fh:
            first_line = fh.readline(256)
    except OSError:
        return False
    return first_line.startswith(b"#!") and b"python" in first_line


def collect_sources(
    project_root: Path,
    runtime_roots: Iterable[str],
    build_roots: Iterable[str],
) -> list[SourceFile]:
    """Walk both root sets and tag each python source with its role.

    A file reachable from both sets (overlapping or symlinked roots) keeps
    the runtime role.
    """
    sources: list[SourceFile] = []
    seen: set[Path] = set()
    for role, roots in ((Role.RUNTIME, runtime_roots), (Role.BUILD, build_roots)):
        for path in walk(project_root, roots):
            key = path.resolve()
            if key in seen or not is_python_source(path):
                continue
            seen.add(key)
            sources.append(SourceFile(path=path, role=role))
    log.debug(
        "walker.collected",
        runtime=sum(1 for s in sources if s.role is Role.RUNTIME),
        build=sum(1 for s in sources if s.role is Role.BUILD),
    )
    return sources
