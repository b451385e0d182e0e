"""
Tests for domain models — step bookkeeping, receipts, reports.
"""

import json

from provisioner.core.models import (
    ElevationStrategy,
    OsIdentity,
    ProvisionReport,
    ProvisionSummary,
    StepReceipt,
    StepState,
)


class TestStepState:
    """StepState tests."""

    def test_starts_idle(self):
        s = StepState()
        assert s.number == 0
        assert not s.active

    def test_numbers_are_monotonic(self):
        s = StepState()
        assert s.enter("a") == 1
        s.leave()
        assert s.enter("b") == 2
        assert s.label == "b"


class TestElevation:
    """ElevationStrategy tests."""

    def test_sudo_default_path(self):
        assert ElevationStrategy.sudo().prefix == ["sudo", "-n"]

    def test_root_is_usable(self):
        assert ElevationStrategy.already_root().usable


class TestReceipt:
    """StepReceipt tests."""

    def test_defaults(self):
        r = StepReceipt(number=3, label="Install packages")
        assert r.ok
        assert r.error is None
        assert r.started_at.endswith("Z")

    def test_failed(self):
        r = StepReceipt(number=3, label="Install packages", status="failed", error="exit 100")
        assert not r.ok


class TestReport:
    """ProvisionReport tests."""

    def test_ok_follows_exit_code(self):
        assert ProvisionReport().ok
        assert not ProvisionReport(exit_code=127).ok

    def test_json_roundtrip(self):
        report = ProvisionReport(
            receipts=[StepReceipt(number=1, label="Preflight")],
            summary=ProvisionSummary(node_version="v20.11.0", notes=["n"]),
        )
        data = json.loads(report.model_dump_json())
        assert data["receipts"][0]["status"] == "ok"
        restored = ProvisionReport.model_validate(data)
        assert restored.summary.node_version == "v20.11.0"


class TestOsIdentity:
    """OsIdentity tests."""

    def test_empty(self):
        ident = OsIdentity.parse("")
        assert ident.id == ""
        assert ident.pretty_name == ""
