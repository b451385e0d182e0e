"""
Runtime installer — Node.js through nvm.

Installs the configured channel, pins it as nvm's ``default`` alias
for future shells, then puts that node's bin directory first on the
PATH this process hands to its children (the equivalent of
``nvm use default`` for a non-shell caller).
"""

from __future__ import annotations

import logging
import os

from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.errors import VerificationError
from provisioner.core.services.provision.nvm import nvm

logger = logging.getLogger(__name__)


def activate_default(ctx: ProvisionContext) -> str:
    """Resolve the default node and prepend its bin dir to PATH."""
    node_path = nvm(ctx, "which", "default").first_line
    if not node_path or not os.path.isabs(node_path):
        raise VerificationError(
            f"nvm could not resolve the default node (got {node_path!r}).",
            remediation="Run 'nvm ls' to inspect installed versions and aliases.",
        )
    ctx.prepend_path(os.path.dirname(node_path))
    return node_path


def install_runtime(ctx: ProvisionContext) -> str:
    """Install/select node; returns the node executable path."""
    cfg = ctx.config

    nvm(ctx, "install", *cfg.nvm_install_args, echo=True)
    nvm(ctx, "alias", "default", cfg.default_alias)
    logger.info("nvm default alias -> %s", cfg.default_alias)

    activate_default(ctx)

    node_version = ctx.run(["node", "-v"]).first_line
    npm_version = ctx.run(["npm", "-v"]).first_line
    node_path = ctx.which("node") or ""
    npm_path = ctx.which("npm") or ""

    logger.info("Node: %s", node_version)
    logger.info("npm:  %s", npm_version)
    logger.info("node path: %s", node_path)
    logger.info("npm path:  %s", npm_path)

    ctx.summary.node_version = node_version
    ctx.summary.npm_version = npm_version
    ctx.summary.node_path = node_path
    ctx.summary.npm_path = npm_path
    return node_path
