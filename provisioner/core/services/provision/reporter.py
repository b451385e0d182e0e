"""
Reporter — step markers and the structured failure report.

Step markers go to stdout through the ``STEP n`` log tag; the failure
report goes to stderr at ERROR so it survives ``--quiet``.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

from provisioner.core.models import StepState
from provisioner.core.services.provision.errors import CommandError, ProvisionError

logger = logging.getLogger(__name__)

SUGGESTED_ACTIONS = (
    "Re-run with: provision --debug run 2>&1 | tee install.debug.log",
    "Check if sudo is available/non-interactive (if not root)",
    "Verify network/DNS access to github.com and registry.npmjs.org",
)

# Plumbing frames that never explain *why* a stage failed
_PLUMBING = {"runner.py", "context.py"}


class Reporter:
    """Moves a StepState forward and reports on it."""

    def __init__(self, state: StepState) -> None:
        self.state = state

    def begin_step(self, label: str) -> int:
        number = self.state.enter(label)
        logger.info(">>> %s", label, extra={"tag": f"STEP {number}"})
        return number

    def end_step(self) -> None:
        logger.info("OK  <<< %s", self.state.label, extra={"tag": f"STEP {self.state.number}"})
        self.state.leave()

    def report_failure(
        self,
        error: BaseException,
        exit_code: int,
        diagnostics: dict[str, str],
    ) -> None:
        """Emit the failure block for ``error``."""
        if self.state.active:
            logger.error("FAILED at STEP %d: %s", self.state.number, self.state.label)
        else:
            logger.error("FAILED outside any step (last step: %d)", self.state.number)
        logger.error("Location: %s", failure_location(error))
        logger.error("Error: %s", error)
        if isinstance(error, CommandError):
            logger.error("Command: %s", error.command)
            for line in error.stderr.strip().splitlines()[-10:]:
                logger.error("  | %s", line)
        logger.error("Exit code: %d", exit_code)
        if isinstance(error, ProvisionError) and error.remediation:
            logger.error("Remediation: %s", error.remediation)
        logger.error("Context:")
        logger.error(
            "  USER=%s UID=%s HOME=%s SHELL=%s",
            diagnostics.get("USER"), diagnostics.get("UID"),
            diagnostics.get("HOME"), diagnostics.get("SHELL"),
        )
        logger.error("  PATH=%s", diagnostics.get("PATH"))
        logger.error("Suggested next actions:")
        for action in SUGGESTED_ACTIONS:
            logger.error("  - %s", action)


def failure_location(error: BaseException) -> str:
    """``file:line in function`` of the stage code that raised."""
    frames = traceback.extract_tb(error.__traceback__)
    for frame in reversed(frames):
        if Path(frame.filename).name not in _PLUMBING:
            return f"{Path(frame.filename).name}:{frame.lineno} in {frame.name}"
    return "unknown"
