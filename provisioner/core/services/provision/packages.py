"""
Package installer — OS prerequisites via apt.

Refresh the index, install the minimal prerequisite set without
recommends, then refresh the CA store on a best-effort basis.
"""

from __future__ import annotations

import logging

from provisioner.core.services.provision.context import ProvisionContext

logger = logging.getLogger(__name__)

# sudo resets the environment, so the frontend is set on the command itself
APT_GET = ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get"]


def apt_update(ctx: ProvisionContext) -> None:
    ctx.run_privileged([*APT_GET, "update", "-y"], echo=True)


def apt_install(ctx: ProvisionContext, packages: list[str]) -> None:
    if not packages:
        return
    ctx.run_privileged(
        [*APT_GET, "install", "-y", "--no-install-recommends", *packages],
        echo=True,
    )


def refresh_ca_certificates(ctx: ProvisionContext) -> bool:
    """Best effort: a failure here is logged and tolerated."""
    result = ctx.run_privileged(["update-ca-certificates"], check=False)
    if not result.ok:
        logger.warning(
            "update-ca-certificates exited %d; continuing with the existing trust store.",
            result.returncode,
        )
    return result.ok


def tool_version(ctx: ProvisionContext, tool: str) -> str:
    """First line of ``<tool> --version``, or 'not found'."""
    if not ctx.which(tool):
        return "not found"
    result = ctx.run([tool, "--version"], check=False)
    return result.first_line if result.ok and result.first_line else "not found"


def install_packages(ctx: ProvisionContext) -> None:
    apt_update(ctx)
    apt_install(ctx, ctx.config.apt_packages)
    refresh_ca_certificates(ctx)

    logger.info("Versions:")
    logger.info("  curl: %s", tool_version(ctx, "curl"))
    logger.info("  git:  %s", tool_version(ctx, "git"))
