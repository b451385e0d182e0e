"""
Domain models — Pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import RunConfig, StepState, ElevationStrategy
"""

from provisioner.core.models.config import RunConfig
from provisioner.core.models.step import (
    ElevationStrategy,
    OsIdentity,
    ProvisionReport,
    ProvisionSummary,
    StepReceipt,
    StepState,
)

__all__ = [
    # config.py
    "RunConfig",
    # step.py
    "ElevationStrategy",
    "OsIdentity",
    "ProvisionReport",
    "ProvisionSummary",
    "StepReceipt",
    "StepState",
]
