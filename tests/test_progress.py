"""Tests for ProgressTracker."""

from __future__ import annotations

import time

import pytest

from depsentinel.progress import AUDIT_PHASES, ProgressTracker


class TestProgressTracker:
    def test_audit_phases_start_pending(self):
        tracker = ProgressTracker()
        assert [p.phase for p in tracker.phases] == list(AUDIT_PHASES)
        assert all(p.status == "pending" for p in tracker.phases)

    def test_track_completes_with_detail(self):
        tracker = ProgressTracker()
        with tracker.track("walk") as phase:
            phase.detail = "12 source files"

        summary = tracker.get_summary()
        assert summary["phases"][0]["status"] == "completed"
        assert summary["phases"][0]["detail"] == "12 source files"

    def test_exception_marks_failed_and_propagates(self):
        tracker = ProgressTracker()
        with pytest.raises(RuntimeError):
            with tracker.track("extract"):
                raise RuntimeError("Could not analyze lib/x.py")
        assert tracker["extract"].status == "failed"
        assert tracker["extract"].error == "Could not analyze lib/x.py"
        assert tracker["extract"].duration is not None

    def test_skip_remaining_only_touches_pending(self):
        tracker = ProgressTracker()
        with tracker.track("walk"):
            pass
        tracker.skip_remaining("extraction failed")

        statuses = [p["status"] for p in tracker.get_summary()["phases"]]
        assert statuses == ["completed", "skipped", "skipped", "skipped"]
        assert tracker["reconcile"].detail == "extraction failed"
        assert tracker["reconcile"].duration is None

    def test_duration(self):
        tracker = ProgressTracker()
        with tracker.track("walk"):
            time.sleep(0.01)
        assert tracker["walk"].duration >= 0.01
        assert tracker.get_summary()["total_duration"] >= 0.01

    def test_ad_hoc_phase_appended(self):
        tracker = ProgressTracker(phases=["walk"])
        tracker.skip("report", "not requested")
        assert [p.phase for p in tracker.phases] == ["walk", "report"]


class TestListeners:
    def test_sees_every_transition(self):
        events = []
        tracker = ProgressTracker(listeners=[lambda p: events.append((p.phase, p.status))])

        with tracker.track("walk"):
            pass
        tracker.skip("extract", "nothing to do")

        assert events == [
            ("walk", "running"),
            ("walk", "completed"),
            ("extract", "skipped"),
        ]

    def test_failing_listener_ignored(self):
        tracker = ProgressTracker(listeners=[lambda p: 1 / 0])
        with tracker.track("walk"):
            pass
        assert tracker["walk"].status == "completed"

    def test_done_flag(self):
        seen = []
        tracker = ProgressTracker(listeners=[lambda p: seen.append(p.done)])
        with tracker.track("walk"):
            pass
        assert seen == [False, True]
