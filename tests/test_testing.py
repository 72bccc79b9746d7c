"""Tests for the pytest helper."""

from __future__ import annotations

import pytest

from depsentinel.auditor import audit
from depsentinel.testing import assert_dependencies, format_failures


class TestAssertDependencies:
    def test_clean_project_returns_report(self, make_project):
        root = make_project({
            "lib/app.py": "import requests\n",
            "tests/test_app.py": "import pytest\n",
            "dependencies.toml": '[required]\nrequests = ""\n[buildRequired]\npytest = ""\n',
        })
        report = assert_dependencies(root, style="light")
        assert report.ok
        assert len(report.verdicts) == 2

    def test_drift_raises_with_every_problem(self, make_project):
        root = make_project({
            "lib/app.py": "import requests\n",
            "dependencies.toml": '[required]\nclick = ""\njson = ""\n',
        })
        with pytest.raises(AssertionError) as excinfo:
            assert_dependencies(root, style="light")
        message = str(excinfo.value)
        assert message.startswith("4 dependency problem(s) in ")
        assert "  - requires requests in dependencies.toml (required)" in message
        assert "  - click is not a runtime dependency" in message
        assert "  - json is not a runtime dependency" in message
        assert "  - json is already bundled with Python 3.0 (baseline 3.9)" in message

    def test_structural_failure_listed(self, make_project):
        root = make_project({"lib/bad.py": "def (:\n", "dependencies.toml": ""})
        with pytest.raises(AssertionError, match="Could not analyze"):
            assert_dependencies(root, style="heavy")

    def test_exclude_passthrough(self, make_project):
        root = make_project({"lib/app.py": "import myproj.util\n", "dependencies.toml": ""})
        assert_dependencies(root, style="light", exclude=["myproj"])


class TestFormatFailures:
    def test_passing_verdicts_omitted(self, make_project):
        root = make_project({
            "lib/app.py": "import requests\nimport yaml\n",
            "dependencies.toml": '[required]\nrequests = ""\n',
        })
        text = format_failures(audit(root, style="light"))
        assert text == "  - requires yaml in dependencies.toml (required)"
