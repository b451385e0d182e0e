"""
Runtime manager installer — nvm, idempotently.

nvm is a SHELL FUNCTION, not a binary: ``shutil.which("nvm")`` never
works.  Presence is decided by the non-empty ``$NVM_DIR/nvm.sh``
marker, and every nvm call runs in a fresh bash that sources it.

The upstream installer is downloaded to a tempfile (optionally checked
against a pinned SHA256) and executed from there instead of being
piped straight into a shell.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

from provisioner.core.services.provision.context import ProvisionContext
from provisioner.core.services.provision.errors import VerificationError
from provisioner.core.services.provision.runner import CmdResult

logger = logging.getLogger(__name__)

# "$@" keeps arguments intact; $0 is set to "nvm" for error messages
_NVM_SHIM = 'source "$NVM_DIR/nvm.sh" && nvm "$@"'


def marker_present(marker: Path) -> bool:
    """True if the marker exists and is non-empty."""
    try:
        return marker.is_file() and marker.stat().st_size > 0
    except OSError:
        return False


def nvm(ctx: ProvisionContext, *args: str, **kwargs) -> CmdResult:
    """Run ``nvm <args>`` with nvm loaded into a throwaway bash."""
    return ctx.run(["bash", "-c", _NVM_SHIM, "nvm", *args], **kwargs)


def download_installer(ctx: ProvisionContext) -> Path:
    """Fetch the pinned install.sh into a private tempfile.

    Raises:
        VerificationError: If a checksum is configured and does not match.
    """
    cfg = ctx.config
    fd, name = tempfile.mkstemp(suffix=".sh", prefix="nvm_install_")
    os.close(fd)
    path = Path(name)

    try:
        ctx.run(["curl", "-fsSL", "--proto", "=https", "--tlsv1.2", "-o", str(path), cfg.nvm_install_url])

        actual = hashlib.sha256(path.read_bytes()).hexdigest()
        logger.info("Downloaded %s (sha256=%s)", cfg.nvm_install_url, actual)
        if cfg.nvm_install_sha256:
            expected = cfg.nvm_install_sha256.lower().removeprefix("sha256:")
            if actual != expected:
                raise VerificationError(
                    f"SHA256 mismatch for {cfg.nvm_install_url}: expected {expected}, got {actual}",
                    remediation="Check NVM_VERSION / NVM_INSTALL_SHA256; the script may have been tampered with.",
                )
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    path.chmod(0o700)
    return path


def run_installer(ctx: ProvisionContext) -> None:
    """Download and execute the nvm installer for ``config.nvm_dir``."""
    nvm_dir = Path(ctx.config.nvm_dir)
    # install.sh refuses a custom NVM_DIR that does not exist yet
    nvm_dir.mkdir(parents=True, exist_ok=True)

    script = download_installer(ctx)
    try:
        ctx.run(["bash", str(script)], echo=True)
    finally:
        script.unlink(missing_ok=True)


def install_nvm(ctx: ProvisionContext) -> str:
    """Ensure nvm is installed and loadable; returns its version."""
    cfg = ctx.config
    ctx.env["NVM_DIR"] = cfg.nvm_dir

    if marker_present(cfg.nvm_marker):
        logger.info("nvm already present at: %s", cfg.nvm_dir)
    else:
        logger.info("Installing nvm %s to: %s", cfg.nvm_version, cfg.nvm_dir)
        run_installer(ctx)

    if not marker_present(cfg.nvm_marker):
        raise VerificationError(
            f"nvm.sh not found after installation. Expected at: {cfg.nvm_marker}",
            remediation="Check the installer output above and that NVM_DIR is writable.",
        )

    version = nvm(ctx, "--version").first_line
    logger.info("nvm version: %s", version)

    ctx.summary.nvm_version = version
    ctx.summary.nvm_dir = cfg.nvm_dir
    return version
