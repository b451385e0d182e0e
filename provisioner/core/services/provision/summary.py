"""
Summary — the final report.  Read-only: it only logs what earlier
stages recorded on the context.
"""

from __future__ import annotations

import logging

from provisioner.core.models import ProvisionSummary
from provisioner.core.services.provision.context import ProvisionContext

logger = logging.getLogger(__name__)

NOTES = [
    "This only installs the CLI. Authentication/config (if required) happens "
    "when running it interactively for the first time.",
    "For non-interactive SSH agents, plan how you provide credentials/tokens "
    "in your runtime environment.",
]


def summarize(ctx: ProvisionContext) -> ProvisionSummary:
    s = ctx.summary
    s.notes = list(NOTES)

    logger.info("Installation completed.")
    logger.info("What was installed:")
    logger.info("  - nvm:   %s   (dir: %s)", s.nvm_version, s.nvm_dir)
    logger.info("  - node:  %s   (%s)", s.node_version, s.node_path)
    logger.info("  - npm:   %s   (%s)", s.npm_version, s.npm_path)
    logger.info("  - %s: %s", ctx.config.app_bin, s.app_path)
    logger.info("Notes:")
    for note in s.notes:
        logger.info("  - %s", note)
    return s
