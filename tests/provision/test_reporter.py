"""
Reporter — step markers and the failure report.
"""

from __future__ import annotations

import logging

import pytest

from provisioner.core.models import StepState
from provisioner.core.services.provision.errors import CommandError, ElevationError
from provisioner.core.services.provision.reporter import SUGGESTED_ACTIONS, Reporter, failure_location

DIAG = {"USER": "dev", "UID": "1000", "HOME": "/home/dev", "SHELL": "/bin/bash", "PATH": "/usr/bin:/bin"}


def _messages(caplog: pytest.LogCaptureFixture, level: int) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == level]


class TestSteps:
    def test_numbers_increase(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO)
        reporter = Reporter(StepState())
        assert reporter.begin_step("First") == 1
        reporter.end_step()
        assert reporter.begin_step("Second") == 2
        assert reporter.state.label == "Second"

        begin = caplog.records[0]
        assert begin.getMessage() == ">>> First"
        assert begin.tag == "STEP 1"
        assert caplog.records[1].getMessage() == "OK  <<< First"

    def test_end_clears_label(self):
        reporter = Reporter(StepState())
        reporter.begin_step("Only")
        reporter.end_step()
        assert not reporter.state.active
        assert reporter.state.number == 1


class TestFailure:
    def _raise(self, error: Exception) -> Exception:
        try:
            raise error
        except Exception as e:
            return e

    def test_inside_step(self, caplog: pytest.LogCaptureFixture):
        reporter = Reporter(StepState())
        reporter.begin_step("Install required packages via apt")
        err = self._raise(ElevationError("sudo requires a password", remediation="configure passwordless sudo"))
        reporter.report_failure(err, 1, DIAG)

        errors = _messages(caplog, logging.ERROR)
        assert errors[0] == "FAILED at STEP 1: Install required packages via apt"
        assert errors[1].startswith("Location: test_reporter.py:")
        assert "Error: sudo requires a password" in errors
        assert "Exit code: 1" in errors
        assert "Remediation: configure passwordless sudo" in errors
        assert "  USER=dev UID=1000 HOME=/home/dev SHELL=/bin/bash" in errors
        assert "  PATH=/usr/bin:/bin" in errors
        for action in SUGGESTED_ACTIONS:
            assert f"  - {action}" in errors

    def test_outside_step(self, caplog: pytest.LogCaptureFixture):
        reporter = Reporter(StepState())
        reporter.begin_step("One")
        reporter.end_step()
        reporter.report_failure(self._raise(RuntimeError("late")), 1, DIAG)
        assert _messages(caplog, logging.ERROR)[0] == "FAILED outside any step (last step: 1)"

    def test_command_details(self, caplog: pytest.LogCaptureFixture):
        reporter = Reporter(StepState())
        reporter.begin_step("Install")
        err = self._raise(CommandError(["apt-get", "install", "-y", "nope"], 100, stderr="E: Unable to locate package nope\n"))
        reporter.report_failure(err, err.exit_code, DIAG)

        errors = _messages(caplog, logging.ERROR)
        assert "Command: apt-get install -y nope" in errors
        assert "  | E: Unable to locate package nope" in errors
        assert "Exit code: 100" in errors
        assert not any(m.startswith("Remediation:") for m in errors)


class TestLocation:
    def test_no_traceback(self):
        assert failure_location(RuntimeError("x")) == "unknown"
