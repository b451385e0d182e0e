"""
Pipeline runner — runs the stages in order and owns failure handling.

Flow:
    preflight → elevation → apt packages → nvm → node → app → summary

Stages raise; they never report.  The runner wraps every stage in a
step, records a receipt, and on the first error prints the failure
report (with the step that was current) and stops.  The report's
``exit_code`` is what the process should exit with: the failing
command's own status, or 1 for fatal checks.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from provisioner.core.models import ProvisionReport, RunConfig, StepReceipt
from provisioner.core.models.step import now_iso
from provisioner.core.services.provision.application import install_application
from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.elevation import resolve_elevation
from provisioner.core.services.provision.errors import ProvisionError
from provisioner.core.services.provision.nvm import install_nvm
from provisioner.core.services.provision.packages import install_packages
from provisioner.core.services.provision.preflight import run_preflight
from provisioner.core.services.provision.reporter import Reporter
from provisioner.core.services.provision.runtime import install_runtime
from provisioner.core.services.provision.summary import summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    label: str
    run: Callable[[ProvisionContext], Any]


def build_stages(config: RunConfig) -> list[Stage]:
    return [
        Stage("Preflight checks (OS / shell / permissions)", run_preflight),
        Stage("Determine privilege escalation method (sudo/non-interactive)", resolve_elevation),
        Stage(
            f"Install required packages via apt ({', '.join(config.apt_packages)})",
            install_packages,
        ),
        Stage(f"Install or verify nvm ({config.nvm_version})", install_nvm),
        Stage(f"Install Node.js via nvm ({config.node_channel}) and set as default", install_runtime),
        Stage(f"Install {config.app_package} globally with npm", install_application),
        Stage("Final summary / next steps", summarize),
    ]


def run_pipeline(
    ctx: ProvisionContext,
    stages: Sequence[Stage] | None = None,
) -> ProvisionReport:
    """Run all stages; never raises for provisioning failures.

    Args:
        ctx: Provision context (config, runner, environment).
        stages: Override the default stage list (tests).

    Returns:
        ProvisionReport with receipts, summary and exit code.
    """
    if stages is None:
        stages = build_stages(ctx.config)

    reporter = Reporter(ctx.step)
    report = ProvisionReport()

    for stage in stages:
        number = reporter.begin_step(stage.label)
        started_at = now_iso()
        start = time.monotonic()
        try:
            stage.run(ctx)
        except Exception as e:
            if isinstance(e, ProvisionError):
                exit_code = e.exit_code
            else:
                logger.debug("Unexpected error in step %d", number, exc_info=True)
                exit_code = 1
            reporter.report_failure(e, exit_code, ctx.diagnostics())
            report.receipts.append(
                StepReceipt(
                    number=number,
                    label=stage.label,
                    status="failed",
                    started_at=started_at,
                    duration_ms=int((time.monotonic() - start) * 1000),
                    error=str(e),
                )
            )
            report.exit_code = exit_code
            report.failed_step = stage.label
            return report

        report.receipts.append(
            StepReceipt(
                number=number,
                label=stage.label,
                started_at=started_at,
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        )
        reporter.end_step()

    report.summary = ctx.summary
    return report


def provision(config: RunConfig, **context_overrides: Any) -> ProvisionReport:
    """Build a context for ``config`` and run the full pipeline."""
    ctx = ProvisionContext(config=config, **context_overrides)
    return run_pipeline(ctx)
