"""
Preflight — is this a host and a user we should provision as?

Order matters: interpreter first (nothing else works without it),
then OS identity (warn only), then privilege level.
"""

from __future__ import annotations

import logging

from provisioner.core.models import OsIdentity
from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.errors import EnvironmentViolation

logger = logging.getLogger(__name__)

# nvm is a set of bash functions; everything nvm-related runs through it
SHELL = "bash"


def check_interpreter(ctx: ProvisionContext) -> str:
    """Make sure bash is available to load nvm into."""
    bash = ctx.which(SHELL)
    if not bash:
        raise EnvironmentViolation(
            "bash was not found on PATH; nvm can only be loaded into bash.",
            remediation="Install bash (apt-get install bash) or fix PATH, then re-run.",
        )
    logger.info("Shell for nvm: %s", bash)
    return bash


def read_os_identity(ctx: ProvisionContext) -> OsIdentity | None:
    """Parse the OS descriptor; mismatches are logged, never fatal."""
    cfg = ctx.config
    try:
        text = ctx.os_release_path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("%s not readable; cannot verify OS.", ctx.os_release_path)
        return None

    ident = OsIdentity.parse(text)
    logger.info("Detected OS: %s", ident.pretty_name or "unknown")
    if ident.id != cfg.expected_os_id:
        logger.warning(
            "This script is intended for %s. Detected ID=%s. Proceeding anyway.",
            cfg.expected_os_id, ident.id or "unknown",
        )
    if ident.version_id != cfg.expected_os_version:
        logger.warning(
            "Target is %s %s. Detected VERSION_ID=%s. Proceeding anyway.",
            cfg.expected_os_id, cfg.expected_os_version, ident.version_id or "unknown",
        )
    ctx.os_identity = ident
    return ident


def check_privilege(ctx: ProvisionContext) -> None:
    """Refuse to run as root unless explicitly allowed."""
    if not ctx.is_root:
        return
    if not ctx.config.allow_root:
        raise EnvironmentViolation(
            "Running as root is disabled by default (nvm is per-user).",
            remediation="Re-run with: ALLOW_ROOT=1 provision run  (or run as a non-root user).",
        )
    logger.warning(
        "Running as root (ALLOW_ROOT=1). nvm will be installed under %s.",
        ctx.config.nvm_dir,
    )


def run_preflight(ctx: ProvisionContext) -> None:
    check_interpreter(ctx)
    read_os_identity(ctx)
    check_privilege(ctx)
