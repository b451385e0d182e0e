"""
Package installer — apt commands, elevation and best-effort CA refresh.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from provisioner.core.models import ElevationStrategy
from provisioner.core.services.provision.errors import CommandError
from provisioner.core.services.provision.packages import (
    install_packages,
    refresh_ca_certificates,
    tool_version,
)
from provisioner.core.services.provision.runner import CommandRunner
from tests.provision.fake_host import FakeHost, healthy_host


@pytest.fixture
def sudo_host(host: FakeHost) -> FakeHost:
    host.ctx.elevation = ElevationStrategy.sudo("/usr/bin/sudo")
    return host


class TestInstallPackages:
    def test_update_then_install_without_recommends(self, sudo_host: FakeHost):
        install_packages(sudo_host.ctx)
        argvs = sudo_host.runner.argvs()
        assert argvs[0] == [
            "/usr/bin/sudo", "-n", "env", "DEBIAN_FRONTEND=noninteractive",
            "apt-get", "update", "-y",
        ]
        assert argvs[1] == [
            "/usr/bin/sudo", "-n", "env", "DEBIAN_FRONTEND=noninteractive",
            "apt-get", "install", "-y", "--no-install-recommends",
            "ca-certificates", "curl", "git", "build-essential",
        ]
        assert argvs[2] == ["/usr/bin/sudo", "-n", "update-ca-certificates"]

    def test_root_runs_without_prefix(self, tmp_path: Path):
        host = healthy_host(tmp_path, euid=0, allow_root=True)
        host.ctx.elevation = ElevationStrategy.already_root()
        install_packages(host.ctx)
        assert host.runner.argvs()[0][:3] == ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get"]

    def test_ca_refresh_failure_tolerated(self, sudo_host: FakeHost, caplog: pytest.LogCaptureFixture):
        sudo_host.runner.on("update-ca-certificates", returncode=1)
        install_packages(sudo_host.ctx)
        assert "update-ca-certificates exited 1" in caplog.text

    def test_missing_ca_tool_tolerated(self, tmp_path: Path):
        host = healthy_host(tmp_path, euid=0, allow_root=True)
        host.ctx.elevation = ElevationStrategy.already_root()
        host.ctx.runner = CommandRunner()
        host.ctx.env["PATH"] = str(tmp_path)
        assert refresh_ca_certificates(host.ctx) is False

    def test_apt_failure_propagates(self, sudo_host: FakeHost):
        sudo_host.runner.on("apt-get", "install", returncode=100, stderr="E: Unable to locate package\n")
        with pytest.raises(CommandError) as exc:
            install_packages(sudo_host.ctx)
        assert exc.value.exit_code == 100
        assert "apt-get" in exc.value.command

    def test_versions_logged(self, sudo_host: FakeHost, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO)
        install_packages(sudo_host.ctx)
        assert "curl: curl 7.81.0" in caplog.text
        assert "git:  git version 2.34.1" in caplog.text


class TestToolVersion:
    def test_missing_tool(self, host: FakeHost):
        assert tool_version(host.ctx, "wget") == "not found"
        assert host.runner.calls == []

    def test_failing_version_command(self, host: FakeHost):
        host.runner.on("git", "--version", returncode=2)
        assert tool_version(host.ctx, "git") == "not found"
