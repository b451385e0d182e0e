"""
Command runner — the SINGLE PLACE where ``subprocess.run`` is called.

Every external tool (apt-get, sudo, curl, bash/nvm, npm, the installed
CLI) goes through ``CommandRunner.run``.  Logging, environment
construction and failure mapping are centralised here so stages stay
a flat list of "run this, then that".

Invariants:
- stdin is always /dev/null, so nothing can block on a prompt
- the environment is passed explicitly (no reliance on the parent
  shell having sourced anything)
- a non-zero exit raises ``CommandError`` unless ``check=False``
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from provisioner.core.services.provision.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def first_line(self) -> str:
        """First non-blank line of stdout (version banners etc.)."""
        for line in self.stdout.splitlines():
            if line.strip():
                return line.strip()
        return ""


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Runs external commands with consistent logging."""

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        env: Mapping[str, str] | None = None,
        merge_stderr: bool = False,
        echo: bool = False,
    ) -> CmdResult:
        """Run a command to completion.

        Args:
            argv: Command and arguments.
            check: Raise ``CommandError`` on a non-zero exit.
            env: Full environment for the child (default: os.environ).
            merge_stderr: Fold stderr into stdout (for tools that print
                their version on either stream).
            echo: Log output lines at INFO instead of DEBUG.

        Returns:
            CmdResult with captured output.
        """
        argv_list = list(argv)
        logger.debug("CMD %s", fmt_argv(argv_list))

        start = time.monotonic()
        try:
            p = subprocess.run(
                argv_list,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                env=dict(env) if env is not None else os.environ.copy(),
            )
        except (FileNotFoundError, PermissionError) as e:
            # Same statuses a shell reports for unknown / non-executable commands
            if isinstance(e, FileNotFoundError):
                returncode, reason = 127, "command not found"
            else:
                returncode, reason = 126, "permission denied"
            stderr = f"{argv_list[0]}: {reason}"
            if check:
                raise CommandError(argv_list, returncode, stderr=stderr) from e
            logger.debug("CMD %s: %s", fmt_argv(argv_list), reason)
            return CmdResult(argv=argv_list, returncode=returncode, stdout="", stderr=stderr)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        stdout = p.stdout or ""
        stderr = p.stderr or ""
        level = logging.INFO if echo else logging.DEBUG
        for line in stdout.splitlines():
            logger.log(level, "  %s", line)
        for line in stderr.splitlines():
            logger.log(level, "  %s", line)

        if check and p.returncode != 0:
            raise CommandError(argv_list, p.returncode, stderr=stderr[-2000:])

        return CmdResult(
            argv=argv_list,
            returncode=p.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed_ms,
        )

    def which(self, name: str, path: str | None = None) -> str | None:
        """Resolve an executable on ``path`` (default: the process PATH)."""
        return shutil.which(name, path=path)
