"""Tests for the manifest loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from depsentinel.exceptions import ManifestError
from depsentinel.manifest import DEFAULT_MANIFEST, load_manifest, parse_manifest


class TestParseManifest:
    def test_both_sections(self):
        manifest = parse_manifest(
            '[required]\nrequests = "2.31"\nstructlog = ""\n\n[buildRequired]\npytest = "7.0"\n'
        )
        assert manifest.required == {"requests": "2.31", "structlog": None}
        assert manifest.build_required == {"pytest": "7.0"}
        assert manifest.source == DEFAULT_MANIFEST

    def test_missing_sections_are_empty(self):
        manifest = parse_manifest('[required]\nclick = "8"\n')
        assert manifest.build_required == {}

    @pytest.mark.parametrize("version", ["", "0", "*", "  "])
    def test_any_version_markers(self, version):
        manifest = parse_manifest(f'[required]\nclick = "{version}"\n')
        assert manifest.required == {"click": None}

    def test_dotted_module_names(self):
        manifest = parse_manifest('[required]\n"google.protobuf" = "4.0"\n')
        assert manifest.required == {"google.protobuf": "4.0"}

    def test_unknown_keys_ignored(self):
        manifest = parse_manifest('name = "demo"\n[required]\nclick = ""\n')
        assert manifest.required == {"click": None}

    def test_invalid_toml(self):
        with pytest.raises(ManifestError, match="invalid TOML"):
            parse_manifest("[required\nclick = 1\n")

    def test_section_not_a_table(self):
        with pytest.raises(ManifestError, match="must be a table"):
            parse_manifest('required = ["click"]\n')

    def test_non_string_version(self):
        with pytest.raises(ManifestError, match="must be a string"):
            parse_manifest("[required]\nclick = 8\n")

    def test_invalid_module_name(self):
        with pytest.raises(ManifestError, match="not a valid module name"):
            parse_manifest('[required]\n"not-a-module" = ""\n')


class TestLoadManifest:
    def test_load(self, tmp_path: Path):
        (tmp_path / "dependencies.toml").write_text('[required]\nclick = "8.1"\n')
        manifest = load_manifest(tmp_path)
        assert manifest.required == {"click": "8.1"}

    def test_custom_path(self, tmp_path: Path):
        (tmp_path / "meta").mkdir()
        (tmp_path / "meta" / "deps.toml").write_text('[buildRequired]\npytest = ""\n')
        manifest = load_manifest(tmp_path, "meta/deps.toml")
        assert manifest.build_required == {"pytest": None}
        assert manifest.source == "meta/deps.toml"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(tmp_path)

    def test_empty_file_is_an_empty_manifest(self, tmp_path: Path):
        (tmp_path / "dependencies.toml").write_text("")
        manifest = load_manifest(tmp_path)
        assert manifest.required == {}
        assert manifest.build_required == {}

    def test_undecodable_file(self, tmp_path: Path):
        (tmp_path / "dependencies.toml").write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(ManifestError):
            load_manifest(tmp_path)
