"""Light extraction strategy: regex scan of the source text.

Fast and approximate. Imports hidden inside multi-line strings, built with
``importlib.import_module`` or ``__import__``, or split across statements on
one line are not seen. Never fails.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from depsentinel.extractors.base import UsageExtractor

log = structlog.get_logger("depsentinel.extract")

# Scanned left to right, so a quote inside a comment (or a hash inside a
# string) is consumed by whichever token starts first.
_DOCUMENTATION_RE = re.compile(
    r'"""[\s\S]*?"""'
    r"|'''[\s\S]*?'''"
    r'|"(?:\\.|[^"\\\n])*"'
    r"|'(?:\\.|[^'\\\n])*'"
    r"|#[^\n]*"
)

# from X import ...  (absolute only: relative names start with a dot)
_FROM_IMPORT_RE = re.compile(r"^\s*from\s+(\w[\w.]*)\s+import\b", re.MULTILINE)
# import a, b.c as d, e
_IMPORT_LIST_RE = re.compile(r"^\s*import\s+(.+)$", re.MULTILINE)
_LEADING_NAME_RE = re.compile(r"^\s*(\w[\w.]*)")


def strip_documentation(text: str) -> str:
    """Blank out string literals and comments, keeping line breaks."""
    return _DOCUMENTATION_RE.sub(lambda m: "\n" * m.group(0).count("\n"), text)


def scan_imports(code: str) -> set[str]:
    modules: set[str] = set()
    for m in _FROM_IMPORT_RE.finditer(code):
        modules.add(m.group(1).rstrip("."))
    for m in _IMPORT_LIST_RE.finditer(code):
        for entry in m.group(1).split(","):
            name = _LEADING_NAME_RE.match(entry)
            if name:
                modules.add(name.group(1).rstrip("."))
    return modules


class LightExtractor(UsageExtractor):
    """Strips documentation, then matches import statements line by line."""

    @property
    def name(self) -> str:
        return "light"

    def extract(self, path: Path) -> set[str]:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            log.warning("extract.unreadable", path=str(path), error=str(exc))
            return set()
        return scan_imports(strip_documentation(text))
