"""
Provision context — the explicit state threaded through every stage.

Holds the resolved config, the command runner, the step record, the
elevation decision and the environment that child processes see.
Stages read and extend it; nothing lives in module globals.

The environment starts as a copy of ``os.environ`` and grows as tools
are installed (NVM_DIR, the node bin directory on PATH), which is how
later commands "see" what earlier stages installed within one process.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.core.models import (
    ElevationStrategy,
    OsIdentity,
    ProvisionSummary,
    RunConfig,
    StepState,
)
from provisioner.core.services.provision.runner import CmdResult, CommandRunner

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")


@dataclass
class ProvisionContext:
    """Everything a stage needs, passed explicitly."""

    config: RunConfig
    runner: CommandRunner = field(default_factory=CommandRunner)
    env: dict[str, str] = field(default_factory=lambda: dict(os.environ))
    euid: int = field(default_factory=os.geteuid)
    os_release_path: Path = OS_RELEASE_PATH

    step: StepState = field(default_factory=StepState)
    elevation: ElevationStrategy | None = None
    os_identity: OsIdentity | None = None
    summary: ProvisionSummary = field(default_factory=ProvisionSummary)

    @property
    def is_root(self) -> bool:
        return self.euid == 0

    @property
    def search_path(self) -> str:
        return self.env.get("PATH", os.defpath)

    def prepend_path(self, directory: str) -> None:
        """Put ``directory`` first on PATH for all later commands."""
        parts = [p for p in self.search_path.split(os.pathsep) if p and p != directory]
        self.env["PATH"] = os.pathsep.join([directory, *parts])
        logger.debug("PATH now starts with %s", directory)

    def which(self, name: str) -> str | None:
        return self.runner.which(name, path=self.search_path)

    def run(self, argv: Sequence[str], **kwargs) -> CmdResult:
        """Run an unprivileged command in the constructed environment."""
        return self.runner.run(argv, env=self.env, **kwargs)

    def run_privileged(self, argv: Sequence[str], **kwargs) -> CmdResult:
        """Run a command through the elevation strategy decided earlier."""
        if self.elevation is None:
            raise RuntimeError("Elevation strategy not resolved yet")
        return self.runner.run(self.elevation.wrap(list(argv)), env=self.env, **kwargs)

    def diagnostics(self) -> dict[str, str]:
        """Snapshot of who/where we are, for failure reports."""
        return environment_snapshot(self.env, self.euid)


def environment_snapshot(env: Mapping[str, str], euid: int) -> dict[str, str]:
    return {
        "USER": env.get("USER") or env.get("LOGNAME") or "unknown",
        "UID": str(euid),
        "HOME": env.get("HOME", "unset"),
        "SHELL": env.get("SHELL", "unset"),
        "PATH": env.get("PATH", "unset"),
    }
