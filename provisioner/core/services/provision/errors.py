"""
Provisioning errors.

Stages never catch these.  They propagate to the pipeline runner,
which attaches the current step, prints the failure report and turns
``exit_code`` into the process exit status.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence


class ProvisionError(Exception):
    """Base class for every fatal provisioning condition."""

    exit_code: int = 1

    def __init__(self, message: str, *, remediation: str = "") -> None:
        super().__init__(message)
        self.remediation = remediation


class EnvironmentViolation(ProvisionError):
    """Wrong interpreter or disallowed privilege level."""


class ElevationError(ProvisionError):
    """No way to run privileged commands without prompting."""


class VerificationError(ProvisionError):
    """An install step finished but its expected result is missing."""


class CommandError(ProvisionError):
    """An external command exited non-zero."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        *,
        stderr: str = "",
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed (exit {returncode}): {self.command}")

    @property
    def command(self) -> str:
        return " ".join(shlex.quote(a) for a in self.argv)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        if self.returncode < 0:
            # Killed by a signal: report it the way a shell would
            return 128 - self.returncode
        return self.returncode or 1
