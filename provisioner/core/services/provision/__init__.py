"""
Provisioning services — nvm, Node.js and a global npm CLI on Ubuntu.

Re-exports the entry points used by the CLI:

    from provisioner.core.services.provision import ProvisionContext, run_pipeline
"""

from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.detection import detect_host
from provisioner.core.services.provision.errors import (
    CommandError,
    ElevationError,
    EnvironmentViolation,
    ProvisionError,
    VerificationError,
)
from provisioner.core.services.provision.pipeline import (
    Stage,
    build_stages,
    provision,
    run_pipeline,
)
from provisioner.core.services.provision.reporter import Reporter
from provisioner.core.services.provision.runner import CmdResult, CommandRunner

__all__ = [
    "CmdResult",
    "CommandError",
    "CommandRunner",
    "ElevationError",
    "EnvironmentViolation",
    "ProvisionContext",
    "ProvisionError",
    "Reporter",
    "Stage",
    "VerificationError",
    "build_stages",
    "detect_host",
    "provision",
    "run_pipeline",
]
