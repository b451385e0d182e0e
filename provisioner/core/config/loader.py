"""
Configuration loader — resolves the RunConfig for a provisioning run.

Sources, lowest to highest precedence:

    built-in defaults  <  provision.yml  <  environment variables

The YAML file is optional.  It holds RunConfig keys (snake_case),
either flat or wrapped under a ``provision:`` key.  Environment
variables keep the names the shell recipe has always used
(NVM_VERSION, NODE_CHANNEL, GEMINI_PKG, ALLOW_ROOT, NVM_DIR).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from provisioner.core.models.config import RunConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "provision.yml"

# Environment variable → RunConfig field
ENV_VARS: dict[str, str] = {
    "NVM_VERSION": "nvm_version",
    "NODE_CHANNEL": "node_channel",
    "GEMINI_PKG": "app_package",
    "GEMINI_BIN": "app_bin",
    "ALLOW_ROOT": "allow_root",
    "NVM_DIR": "nvm_dir",
    "NVM_INSTALL_SHA256": "nvm_install_sha256",
}


class ConfigError(Exception):
    """Raised when provisioning configuration is invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for provision.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to provision.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_file(path: Path) -> dict[str, Any]:
    """Read provision.yml into a plain mapping."""
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    section = data.get("provision", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'provision' to be a mapping in {path}")
    return dict(section)


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect RunConfig overrides from the environment.

    Empty values count as unset, like ``${VAR:-default}`` in a shell.
    """
    overrides: dict[str, str] = {}
    for var, field_name in ENV_VARS.items():
        value = environ.get(var, "")
        if value.strip():
            overrides[field_name] = value
    return overrides


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    search: bool = True,
) -> RunConfig:
    """Load and validate the run configuration.

    Args:
        path: Explicit path to provision.yml.  If None and ``search``
            is set, searches upward from the working directory; a
            missing file is fine and means "defaults only".
        environ: Environment to read overrides from (default: os.environ).
        search: Whether to look for provision.yml when ``path`` is None.

    Returns:
        Frozen RunConfig.

    Raises:
        ConfigError: If the file or any value is invalid.
    """
    if environ is None:
        environ = os.environ

    data: dict[str, Any] = {}
    if path is None and search:
        path = find_config_file()
    if path is not None:
        logger.debug("Loading provision config from %s", path)
        data.update(_read_file(path))

    data.update(env_overrides(environ))

    try:
        config = RunConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid provisioning configuration: {e}") from e

    logger.debug(
        "Resolved config: nvm=%s node=%s app=%s nvm_dir=%s",
        config.nvm_version, config.node_channel, config.app_package, config.nvm_dir,
    )
    return config
