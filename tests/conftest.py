"""Shared pytest fixtures for depsentinel tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

import pytest
import structlog


@pytest.fixture(autouse=True, scope="session")
def _quiet_structlog():
    """Keep warnings visible on stderr, drop debug/info noise."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _no_style_env(monkeypatch):
    monkeypatch.delenv("DEPSENTINEL_STYLE", raising=False)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative_path: content}`` under a fresh project root."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            f = tmp_path / rel
            f.parent.mkdir(parents=True, exist_ok=True)
            f.write_text(content, encoding="utf-8")
        return tmp_path

    return _make
