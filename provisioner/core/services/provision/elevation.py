"""
Elevation resolver — decide once how privileged commands run.

Root needs nothing.  Anyone else needs sudo that works without a
password: the probe uses ``sudo -n`` so a password requirement fails
on the spot instead of hanging an unattended run.
"""

from __future__ import annotations

import logging

from provisioner.core.models import ElevationStrategy
from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.errors import ElevationError

logger = logging.getLogger(__name__)

NO_SUDO = "sudo is not installed"
NEEDS_PASSWORD = "sudo requires a password"


def probe_elevation(ctx: ProvisionContext) -> ElevationStrategy:
    """Work out the elevation strategy without raising.

    Used directly by ``provision detect``; ``resolve_elevation`` turns
    an unavailable result into a fatal error.
    """
    if ctx.is_root:
        return ElevationStrategy.already_root()

    sudo = ctx.which("sudo")
    if not sudo:
        return ElevationStrategy(kind="unavailable", reason=NO_SUDO)

    probe = ctx.run([sudo, "-n", "true"], check=False)
    if probe.returncode != 0:
        return ElevationStrategy(kind="unavailable", reason=NEEDS_PASSWORD)
    return ElevationStrategy.sudo(sudo)


def resolve_elevation(ctx: ProvisionContext) -> ElevationStrategy:
    strategy = probe_elevation(ctx)

    if strategy.kind == "none":
        logger.info("Running as root; sudo not needed.")
    elif strategy.kind == "non_interactive":
        logger.info("Using sudo (non-interactive).")
    elif strategy.reason == NO_SUDO:
        raise ElevationError(
            "Not root and sudo is not installed.",
            remediation="Install sudo or run as root (ALLOW_ROOT=1).",
        )
    else:
        raise ElevationError(
            "sudo exists but requires a password (non-interactive sudo failed).",
            remediation=(
                "Either: (1) run as root (ALLOW_ROOT=1) or "
                "(2) configure passwordless sudo for this user."
            ),
        )

    ctx.elevation = strategy
    return strategy
