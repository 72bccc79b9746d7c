"""Baseline classifier: is a module already bundled with the Python runtime?

Backed by a static table of CPython standard library top-level modules and
the first CPython release that shipped each one. Modules that predate
Python 3 are recorded as ``3.0``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from depsentinel.names import DELIMITER

DEFAULT_BASELINE = "3.9"

_NO_VERSION = {"", "0"}


@dataclass(frozen=True)
class BaselineEntry:
    first_release: str
    removed_in: str | None = None
    # (bundled module __version__, first python release shipping it), oldest first
    versions: tuple[tuple[str, str], ...] = field(default_factory=tuple)


_SINCE_3_0 = """
__future__ __main__ _thread abc antigravity array ast atexit base64 bdb binascii
bisect builtins bz2 cProfile calendar cmath cmd code codecs codeop collections
colorsys compileall configparser contextlib copy copyreg csv ctypes curses
datetime dbm decimal difflib dis doctest email encodings errno fcntl filecmp
fileinput fnmatch fractions ftplib functools gc genericpath getopt getpass
gettext glob grp gzip hashlib heapq hmac html http idlelib imaplib inspect io
itertools json keyword linecache locale logging mailbox marshal math mimetypes
mmap modulefinder msvcrt multiprocessing netrc nt ntpath nturl2path numbers
opcode operator optparse os pdb pickle pickletools pkgutil platform plistlib
poplib posix posixpath pprint profile pstats pty pwd py_compile pyclbr pydoc
pydoc_data pyexpat queue quopri random re readline reprlib resource
rlcompleter runpy sched select shelve shlex shutil signal site smtplib socket
socketserver sqlite3 sre_compile sre_constants sre_parse ssl stat string
stringprep struct subprocess symtable sys syslog tabnanny tarfile tempfile
termios textwrap this threading time timeit tkinter token tokenize trace
traceback tty turtle turtledemo types unicodedata unittest urllib uuid
warnings wave weakref webbrowser winreg winsound wsgiref xml xmlrpc xxsubtype
zipfile zipimport zlib
"""

_ADDED_LATER = {
    "importlib": "3.1",
    "argparse": "3.2",
    "concurrent": "3.2",
    "sysconfig": "3.2",
    "faulthandler": "3.3",
    "ipaddress": "3.3",
    "lzma": "3.3",
    "venv": "3.3",
    "asyncio": "3.4",
    "ensurepip": "3.4",
    "enum": "3.4",
    "pathlib": "3.4",
    "selectors": "3.4",
    "statistics": "3.4",
    "tracemalloc": "3.4",
    "typing": "3.5",
    "zipapp": "3.5",
    "secrets": "3.6",
    "contextvars": "3.7",
    "dataclasses": "3.7",
    "graphlib": "3.9",
    "zoneinfo": "3.9",
    "tomllib": "3.11",
    "annotationlib": "3.14",
    "compression": "3.14",
    "profiling": "3.15",
}

_REMOVED = {
    "macpath": "3.8",
    "dummy_threading": "3.9",
    "formatter": "3.10",
    "parser": "3.10",
    "symbol": "3.10",
    "binhex": "3.11",
    "asynchat": "3.12",
    "asyncore": "3.12",
    "distutils": "3.12",
    "imp": "3.12",
    "smtpd": "3.12",
    "aifc": "3.13",
    "audioop": "3.13",
    "cgi": "3.13",
    "cgitb": "3.13",
    "chunk": "3.13",
    "crypt": "3.13",
    "imghdr": "3.13",
    "lib2to3": "3.13",
    "mailcap": "3.13",
    "msilib": "3.13",
    "nis": "3.13",
    "nntplib": "3.13",
    "ossaudiodev": "3.13",
    "pipes": "3.13",
    "sndhdr": "3.13",
    "spwd": "3.13",
    "sunau": "3.13",
    "telnetlib": "3.13",
    "uu": "3.13",
    "xdrlib": "3.13",
}

# Stdlib modules exposing __version__, several mirrored by PyPI backports
_BUNDLED_VERSIONS = {
    "argparse": (("1.1", "3.2"),),
    "csv": (("1.0", "3.0"),),
    "ctypes": (("1.1.0", "3.0"),),
    "decimal": (("1.70", "3.0"),),
    "ipaddress": (("1.0", "3.3"),),
    "json": (("2.0.9", "3.0"),),
    "logging": (("0.5.1.2", "3.0"),),
    "re": (("2.2.1", "3.0"),),
}


def _build_table() -> dict[str, BaselineEntry]:
    first: dict[str, str] = {name: "3.0" for name in _SINCE_3_0.split()}
    first.update(_ADDED_LATER)
    for name in _REMOVED:
        first.setdefault(name, "3.0")
    return {
        name: BaselineEntry(
            first_release=release,
            removed_in=_REMOVED.get(name),
            versions=_BUNDLED_VERSIONS.get(name, ()),
        )
        for name, release in first.items()
    }


STDLIB_TABLE: dict[str, BaselineEntry] = _build_table()


def version_key(version: str) -> tuple[int, ...]:
    """``"3.10"`` -> ``(3, 10)``; non-numeric parts are ignored."""
    return tuple(int(part) for part in re.findall(r"\d+", version))


def _lookup(name: str) -> BaselineEntry | None:
    entry = STDLIB_TABLE.get(name)
    if entry is None and DELIMITER in name:
        entry = STDLIB_TABLE.get(name.split(DELIMITER, 1)[0])
    return entry


def first_release(name: str, version: str | None = None) -> str | None:
    """First CPython release bundling *name*, at *version* or newer if given.

    Returns None when the module was never bundled, or when no bundled copy
    reaches *version*.
    """
    entry = _lookup(name)
    if entry is None:
        return None
    if version is None or version.strip() in _NO_VERSION:
        return entry.first_release
    wanted = version_key(version)
    for bundled_version, release in entry.versions:
        if version_key(bundled_version) >= wanted:
            return release
    return None


def removed_in(name: str) -> str | None:
    entry = _lookup(name)
    return entry.removed_in if entry else None


class BaselineClassifier:
    """Decides whether a module is satisfied by the baseline runtime."""

    def __init__(self, baseline: str = DEFAULT_BASELINE) -> None:
        self.baseline = baseline
        self._baseline_key = version_key(baseline)

    def bundled_since(self, name: str, min_version: str | None = None) -> str | None:
        """Release that satisfies *name* at or before the baseline, else None."""
        release = first_release(name, min_version)
        if release is None or removed_in(name) is not None:
            return None
        if version_key(release) > self._baseline_key:
            return None
        return release

    def is_bundled(self, name: str, min_version: str | None = None) -> bool:
        return self.bundled_since(name, min_version) is not None
