"""
Elevation resolver — root, passwordless sudo, and the fatal paths.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from provisioner.core.models import ElevationStrategy
from provisioner.core.services.provision.elevation import probe_elevation, resolve_elevation
from provisioner.core.services.provision.errors import ElevationError
from tests.provision.fake_host import FakeHost, healthy_host


class TestStrategy:
    def test_root_has_no_prefix(self):
        s = ElevationStrategy.already_root()
        assert s.wrap(["apt-get", "update"]) == ["apt-get", "update"]

    def test_sudo_prefix(self):
        s = ElevationStrategy.sudo("/usr/bin/sudo")
        assert s.wrap(["apt-get", "update"]) == ["/usr/bin/sudo", "-n", "apt-get", "update"]

    def test_unavailable_cannot_wrap(self):
        s = ElevationStrategy(kind="unavailable", reason="nope")
        with pytest.raises(RuntimeError):
            s.wrap(["true"])


class TestResolve:
    def test_root_needs_nothing(self, tmp_path: Path):
        host = healthy_host(tmp_path, euid=0, allow_root=True)
        strategy = resolve_elevation(host.ctx)
        assert strategy.kind == "none"
        assert host.ctx.elevation == strategy
        # no probe when already privileged
        assert host.runner.calls == []

    def test_passwordless_sudo(self, host: FakeHost):
        strategy = resolve_elevation(host.ctx)
        assert strategy.kind == "non_interactive"
        assert strategy.prefix == ["/usr/bin/sudo", "-n"]
        assert host.runner.argvs() == [["/usr/bin/sudo", "-n", "true"]]

    def test_password_required_fails_fast(self, host: FakeHost):
        host.runner.on("-n", "true", returncode=1, stderr="sudo: a password is required\n")
        with pytest.raises(ElevationError) as exc:
            resolve_elevation(host.ctx)
        assert "run as root" in exc.value.remediation
        assert "passwordless sudo" in exc.value.remediation
        assert host.ctx.elevation is None

    def test_no_sudo(self, host: FakeHost):
        del host.runner.executables["sudo"]
        with pytest.raises(ElevationError, match="sudo is not installed") as exc:
            resolve_elevation(host.ctx)
        assert "Install sudo" in exc.value.remediation
        assert host.runner.calls == []

    def test_probe_does_not_raise(self, host: FakeHost):
        host.runner.on("-n", "true", returncode=1)
        assert probe_elevation(host.ctx).kind == "unavailable"
