"""
Step and elevation models — the bookkeeping of a provisioning run.

StepState is the only mutable record: the reporter moves it forward as
stages start and finish, and the pipeline reads it to attribute a
failure to a step.  Receipts capture the outcome of each stage.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field


def now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class StepState(BaseModel):
    """Monotonic step counter plus the label of the step in progress."""

    number: int = 0
    label: str | None = None

    @property
    def active(self) -> bool:
        return self.label is not None

    def enter(self, label: str) -> int:
        """Start a new step; returns its number."""
        self.number += 1
        self.label = label
        return self.number

    def leave(self) -> None:
        self.label = None


class ElevationStrategy(BaseModel):
    """How privileged commands are run for the rest of the process."""

    kind: Literal["none", "non_interactive", "unavailable"]
    prefix: list[str] = Field(default_factory=list)
    reason: str = ""

    @classmethod
    def already_root(cls) -> ElevationStrategy:
        return cls(kind="none", reason="running as root")

    @classmethod
    def sudo(cls, sudo_path: str = "sudo") -> ElevationStrategy:
        # -n: fail immediately instead of prompting for a password
        return cls(kind="non_interactive", prefix=[sudo_path, "-n"], reason="passwordless sudo")

    @property
    def usable(self) -> bool:
        return self.kind != "unavailable"

    def wrap(self, argv: list[str]) -> list[str]:
        """Prefix a command with the elevation wrapper (if any)."""
        if not self.usable:
            raise RuntimeError(f"No elevation path available: {self.reason}")
        return [*self.prefix, *argv]


class StepReceipt(BaseModel):
    """Outcome of a single pipeline stage."""

    number: int
    label: str
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=now_iso)
    ended_at: str = Field(default_factory=now_iso)
    duration_ms: int = 0

    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class OsIdentity(BaseModel):
    """The interesting subset of /etc/os-release."""

    id: str = ""
    version_id: str = ""
    pretty_name: str = ""

    @classmethod
    def parse(cls, text: str) -> OsIdentity:
        """Parse os-release ``KEY=value`` lines (values may be quoted)."""
        fields: dict[str, str] = {}
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            fields[key.strip()] = value.strip().strip("\"'")
        return cls(
            id=fields.get("ID", ""),
            version_id=fields.get("VERSION_ID", ""),
            pretty_name=fields.get("PRETTY_NAME", ""),
        )


class ProvisionSummary(BaseModel):
    """Everything installed by a successful run."""

    nvm_version: str = ""
    nvm_dir: str = ""
    node_version: str = ""
    node_path: str = ""
    npm_version: str = ""
    npm_path: str = ""
    npm_prefix: str = ""
    app_package: str = ""
    app_path: str = ""
    app_version_output: str = ""
    notes: list[str] = Field(default_factory=list)


class ProvisionReport(BaseModel):
    """Result of a whole pipeline run."""

    exit_code: int = 0
    receipts: list[StepReceipt] = Field(default_factory=list)
    summary: ProvisionSummary | None = None
    failed_step: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
