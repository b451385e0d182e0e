"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from tests.provision.fake_host import FakeHost, healthy_host


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def host(tmp_path: Path) -> FakeHost:
    """A fresh, fully scripted Ubuntu 22.04 host (non-root user)."""
    return healthy_host(tmp_path)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _clean_provision_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own NVM_DIR & co. out of config tests."""
    for var in (
        "NVM_VERSION",
        "NODE_CHANNEL",
        "GEMINI_PKG",
        "GEMINI_BIN",
        "ALLOW_ROOT",
        "NVM_DIR",
        "NVM_INSTALL_SHA256",
        "PROVISION_LOG_LEVEL",
        "PROVISION_LOG_FILE",
        "PROVISION_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
