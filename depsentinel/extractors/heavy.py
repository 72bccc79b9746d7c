"""Heavy extraction strategy: ask the interpreter itself what a file imports.

Workflow:
    source file -> python [safety flags] -c INTROSPECT_SOURCE <file>
        -> compile() + walk every code object for IMPORT_NAME
        -> "ok\\t<path>" + "import\\t<level>\\t<name>" lines
        -> parse_introspection_output() -> {module names}

Any file the interpreter cannot compile makes the dependency set
unreliable, so every failure raises ``ExtractionError``.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import sys
from pathlib import Path

import structlog

from depsentinel.exceptions import ExtractionError
from depsentinel.extractors.base import UsageExtractor

log = structlog.get_logger("depsentinel.extract")

DEFAULT_TIMEOUT = 60.0

# Runs inside the subordinate interpreter; stdlib only so it works under -I/-s.
INTROSPECT_SOURCE = """\
import dis
import sys

path = sys.argv[1]
with open(path, "rb") as fh:
    source = fh.read()
code = compile(source, path, "exec", dont_inherit=True)
sys.stdout.write("ok\\t%s\\n" % path)
code_type = type(code)


def report(code):
    recent = []
    for ins in dis.get_instructions(code):
        if ins.opname == "IMPORT_NAME":
            level = recent[0].argval if len(recent) == 2 else 0
            if not isinstance(level, int):
                level = 0
            sys.stdout.write("import\\t%d\\t%s\\n" % (level, ins.argval))
        recent = (recent + [ins])[-2:]
    for const in code.co_consts:
        if isinstance(const, code_type):
            report(const)


report(code)
"""

_OK_RE = re.compile(r"^ok\t")
_IMPORT_RE = re.compile(r"^import\t(\d+)\t(\w[\w.]*)$")

# Interpreter flags worth carrying over from a script's shebang
_SAFETY_FLAGS = {"I", "E", "s"}
# Flags whose value follows directly (-Wignore, -Xdev); stop scanning letters there
_FLAGS_WITH_VALUE = {"c", "m", "W", "X"}


def detect_safety_flags(path: Path) -> list[str]:
    """Return the safety flags named on *path*'s shebang line, e.g. ``["-I"]``."""
    try:
        with path.open("rb") as fh:
            first_line = fh.readline(512).decode("utf-8", errors="replace")
    except OSError:
        return []
    if not first_line.startswith("#!"):
        return []

    tokens = first_line[2:].split()
    interpreter_idx = next((i for i, t in enumerate(tokens) if "python" in t), None)
    if interpreter_idx is None:
        return []

    flags: list[str] = []
    for token in tokens[interpreter_idx + 1 :]:
        if not token.startswith("-") or token.startswith("--"):
            break
        for letter in token[1:]:
            if letter in _FLAGS_WITH_VALUE:
                break
            flag = f"-{letter}"
            if letter in _SAFETY_FLAGS and flag not in flags:
                flags.append(flag)
    return flags


def parse_introspection_output(stdout: str) -> set[str] | None:
    """Parse the helper's output.

    Returns:
        Absolute module names, or None if the output has no ``ok`` line.
    """
    seen_ok = False
    modules: set[str] = set()
    for line in stdout.splitlines():
        if _OK_RE.match(line):
            seen_ok = True
            continue
        m = _IMPORT_RE.match(line)
        if m and int(m.group(1)) == 0:
            modules.add(m.group(2))
    return modules if seen_ok else None


class HeavyExtractor(UsageExtractor):
    """
    Compile-and-introspect strategy.

    Sees every import statement the compiler sees, including imports inside
    functions and conditional blocks, at the cost of one subprocess per file.
    """

    def __init__(self, python: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._python = python or sys.executable
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "heavy"

    def extract(self, path: Path) -> set[str]:
        cmd = [self._python, *detect_safety_flags(path), "-c", INTROSPECT_SOURCE, str(path)]
        log.debug("extract.run", path=str(path), flags=cmd[1:-3])
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            raise ExtractionError(str(path), f"timed out after {self._timeout}s")
        except OSError as exc:
            raise ExtractionError(str(path), f"could not run {self._python}: {exc}")

        modules = parse_introspection_output(result.stdout)
        if result.returncode != 0 or modules is None:
            stderr = result.stderr.strip()
            detail = stderr.splitlines()[-1] if stderr else f"exit {result.returncode}"
            raise ExtractionError(str(path), detail)
        return modules

    def check_prerequisites(self) -> list[str]:
        if Path(self._python).is_file() or shutil.which(self._python):
            return []
        return [f"Python interpreter not found: {self._python}"]
