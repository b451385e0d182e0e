"""
Run configuration — what to install and how.

Resolved once at startup (defaults < provision.yml < environment) and
frozen afterwards.  Every stage reads it from the provision context.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

NVM_VERSION_DEFAULT = "v0.39.7"
NODE_CHANNEL_DEFAULT = "--lts"
APP_PACKAGE_DEFAULT = "@google/gemini-cli"
APP_BIN_DEFAULT = "gemini"

# Channel values that select "latest LTS" instead of a concrete version
LTS_CHANNELS = ("--lts", "lts")

# TLS trust store, transfer tool, version control, compiler toolchain
APT_PACKAGES_DEFAULT = ["ca-certificates", "curl", "git", "build-essential"]


def _default_nvm_dir() -> str:
    return str(Path.home() / ".nvm")


class RunConfig(BaseModel):
    """Immutable provisioning configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid", coerce_numbers_to_str=True)

    nvm_version: str = NVM_VERSION_DEFAULT
    node_channel: str = NODE_CHANNEL_DEFAULT
    app_package: str = APP_PACKAGE_DEFAULT
    app_bin: str = APP_BIN_DEFAULT
    allow_root: bool = False
    nvm_dir: str = Field(default_factory=_default_nvm_dir)
    nvm_install_sha256: str | None = None

    expected_os_id: str = "ubuntu"
    expected_os_version: str = "22.04"
    apt_packages: list[str] = Field(default_factory=lambda: list(APT_PACKAGES_DEFAULT))

    @field_validator("nvm_version", "node_channel", "app_package", "app_bin", "nvm_dir")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("nvm_dir")
    @classmethod
    def _expand_home(cls, value: str) -> str:
        return str(Path(value).expanduser())

    @property
    def is_lts_channel(self) -> bool:
        """Whether ``node_channel`` is the symbolic latest-LTS selector."""
        return self.node_channel in LTS_CHANNELS

    @property
    def nvm_install_args(self) -> list[str]:
        """Arguments for ``nvm install``."""
        return ["--lts"] if self.is_lts_channel else [self.node_channel]

    @property
    def default_alias(self) -> str:
        """Target of ``nvm alias default``.

        The LTS channel maps to the wildcard ``lts/*`` so new sessions
        follow the newest LTS line; an explicit version is used as-is.
        """
        return "lts/*" if self.is_lts_channel else self.node_channel

    @property
    def nvm_marker(self) -> Path:
        """File whose non-empty presence means nvm is installed."""
        return Path(self.nvm_dir) / "nvm.sh"

    @property
    def nvm_install_url(self) -> str:
        return f"https://raw.githubusercontent.com/nvm-sh/nvm/{self.nvm_version}/install.sh"
