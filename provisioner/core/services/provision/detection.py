"""
Read-only host probes for ``provision detect``.

Nothing here installs or changes anything; the only command run is
the ``sudo -n true`` probe, which cannot prompt.
"""

from __future__ import annotations

import os

from provisioner.core.models import OsIdentity
from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.elevation import probe_elevation
from provisioner.core.services.provision.nvm import marker_present


def detect_nvm(ctx: ProvisionContext) -> dict:
    """Detect an nvm installation in ``config.nvm_dir``.

    Returns::

        {
            "installed": True,
            "nvm_dir": "/home/user/.nvm",
            "available_versions": ["v20.11.0", "v18.19.0"],
        }
    """
    nvm_dir = ctx.config.nvm_dir
    if not marker_present(ctx.config.nvm_marker):
        return {"installed": False, "nvm_dir": nvm_dir}

    result: dict = {
        "installed": True,
        "nvm_dir": nvm_dir,
        "available_versions": [],
    }

    versions_dir = os.path.join(nvm_dir, "versions", "node")
    if os.path.isdir(versions_dir):
        try:
            result["available_versions"] = sorted(
                (d for d in os.listdir(versions_dir) if d.startswith("v")),
                reverse=True,
            )[:10]
        except OSError:
            pass

    return result


def detect_os(ctx: ProvisionContext) -> dict:
    try:
        ident = OsIdentity.parse(ctx.os_release_path.read_text(encoding="utf-8"))
    except OSError:
        return {"readable": False}
    cfg = ctx.config
    return {
        "readable": True,
        "id": ident.id,
        "version_id": ident.version_id,
        "pretty_name": ident.pretty_name,
        "matches_target": ident.id == cfg.expected_os_id
        and ident.version_id == cfg.expected_os_version,
    }


def detect_host(ctx: ProvisionContext) -> dict:
    """Everything ``provision run`` would care about, without side effects."""
    elevation = probe_elevation(ctx)
    app_path = ctx.which(ctx.config.app_bin)
    return {
        "os": detect_os(ctx),
        "user": ctx.diagnostics()["USER"],
        "uid": ctx.euid,
        "bash": ctx.which("bash"),
        "elevation": {"kind": elevation.kind, "reason": elevation.reason},
        "nvm": detect_nvm(ctx),
        "app": {"bin": ctx.config.app_bin, "path": app_path, "installed": app_path is not None},
    }
