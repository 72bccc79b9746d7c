"""Tests for the baseline (stdlib) classifier."""

from __future__ import annotations

import sys

import pytest

from depsentinel.baseline import (
    STDLIB_TABLE,
    BaselineClassifier,
    first_release,
    removed_in,
    version_key,
)


class TestVersionKey:
    def test_numeric_ordering(self):
        assert version_key("3.10") > version_key("3.9")

    def test_uneven_lengths(self):
        assert version_key("2.0.9") > version_key("2.0")

    def test_suffixes_ignored(self):
        assert version_key("1.0rc1") == (1, 0, 1)


class TestFirstRelease:
    def test_old_module(self):
        assert first_release("os") == "3.0"

    def test_newer_module(self):
        assert first_release("tomllib") == "3.11"
        assert first_release("dataclasses") == "3.7"

    def test_never_bundled(self):
        assert first_release("requests") is None

    def test_dotted_falls_back_to_top_level(self):
        assert first_release("xml.etree") == "3.0"
        assert first_release("importlib.metadata") == "3.1"

    @pytest.mark.parametrize("version", [None, "", "0"])
    def test_no_version_means_any(self, version):
        assert first_release("json", version) == "3.0"

    def test_version_satisfied_by_bundled_copy(self):
        assert first_release("json", "2.0") == "3.0"
        assert first_release("argparse", "1.1") == "3.2"

    def test_version_newer_than_bundled_copy(self):
        assert first_release("argparse", "1.4.0") is None

    def test_version_without_history(self):
        assert first_release("dataclasses", "0.8") is None

    def test_removed_modules_recorded(self):
        assert removed_in("distutils") == "3.12"
        assert removed_in("os") is None
        assert "asyncore" in STDLIB_TABLE


class TestBaselineClassifier:
    def test_default_baseline(self):
        assert BaselineClassifier().baseline == "3.9"

    def test_bundled_before_baseline(self):
        c = BaselineClassifier("3.9")
        assert c.is_bundled("os")
        assert c.is_bundled("zoneinfo")
        assert c.bundled_since("dataclasses") == "3.7"

    def test_newer_than_baseline(self):
        assert not BaselineClassifier("3.9").is_bundled("tomllib")
        assert BaselineClassifier("3.11").is_bundled("tomllib")

    def test_two_digit_minor_versions(self):
        assert BaselineClassifier("3.10").is_bundled("graphlib")

    def test_third_party_never_bundled(self):
        assert not BaselineClassifier("3.13").is_bundled("requests")

    def test_removed_module_not_bundled(self):
        assert not BaselineClassifier("3.9").is_bundled("distutils")

    def test_min_version_consulted(self):
        c = BaselineClassifier("3.9")
        assert c.is_bundled("argparse", "1.0")
        assert not c.is_bundled("argparse", "1.4")


class TestStdlibCoverage:
    @pytest.mark.parametrize(
        "name", ["json", "logging", "re", "csv", "decimal", "ctypes", "opcode", "__main__"]
    )
    def test_core_modules_bundled(self, name):
        assert BaselineClassifier("3.9").is_bundled(name)

    def test_every_public_stdlib_module_known(self):
        missing = sorted(
            name
            for name in sys.stdlib_module_names
            if not name.startswith("_")
            and removed_in(name) is None
            and first_release(name) is None
        )
        assert missing == []
