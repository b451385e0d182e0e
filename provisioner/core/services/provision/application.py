"""
Application installer — the CLI package, globally via npm.

Global scope puts the executable in ``<npm prefix>/bin``, which after
the runtime stage is already on PATH.  The prefix is logged before
installing so a surprising install location is visible in the log.
"""

from __future__ import annotations

import logging
import os

from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.errors import VerificationError

logger = logging.getLogger(__name__)


def npm_prefix(ctx: ProvisionContext) -> str:
    return ctx.run(["npm", "config", "get", "prefix"]).first_line


def probe_version(ctx: ProvisionContext, app_path: str) -> str:
    """Run ``<app> --version`` and log its output.

    A non-zero exit is only a warning: some CLIs do that before they
    have been authenticated.
    """
    tag = os.path.basename(app_path).upper()
    result = ctx.run([app_path, "--version"], check=False, merge_stderr=True)
    for line in result.stdout.splitlines():
        logger.info("[%s] %s", tag, line)
    if not result.ok:
        logger.warning(
            "%s --version returned non-zero (%d) (may be normal depending on cli behavior).",
            os.path.basename(app_path), result.returncode,
        )
    return result.stdout.strip()


def install_application(ctx: ProvisionContext) -> str:
    """Install ``config.app_package`` globally; returns the executable path."""
    cfg = ctx.config

    prefix = npm_prefix(ctx)
    logger.info("npm prefix: %s", prefix)
    logger.info("npm global bin: %s", os.path.join(prefix, "bin"))
    ctx.summary.npm_prefix = prefix

    ctx.run(["npm", "install", "-g", cfg.app_package], echo=True)

    app_path = ctx.which(cfg.app_bin)
    if not app_path:
        raise VerificationError(
            f"{cfg.app_bin} executable not found in PATH after install.",
            remediation="Check npm global bin and PATH.",
        )
    logger.info("%s path: %s", cfg.app_bin, app_path)

    ctx.summary.app_package = cfg.app_package
    ctx.summary.app_path = app_path
    ctx.summary.app_version_output = probe_version(ctx, app_path)
    return app_path
