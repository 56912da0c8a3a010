"""Shared pytest fixtures for adolinks tests."""

import os
from pathlib import Path

import pytest

from adolinks.config.settings import Settings
from adolinks.config.store import ConfigurationStore
from adolinks.utils.logging import reset_logging
from tests.helpers.ado_server import BASE_URL, FakeAdoServer

# Enable pytest-asyncio for async test support
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the user's configuration.

    Removes ADO_* and ADOLINKS_* environment variables and runs each test
    inside an empty repository so no local .adolinks file is discovered.
    """
    for key in list(os.environ):
        if key.startswith(("ADO_", "ADOLINKS_")):
            monkeypatch.delenv(key, raising=False)

    workspace = tmp_path / "workspace"
    (workspace / ".git").mkdir(parents=True)
    monkeypatch.chdir(workspace)

    yield workspace

    reset_logging()


@pytest.fixture
def settings() -> Settings:
    """Settings of an enabled collection with a release note prefix."""
    return Settings(
        enabled=True,
        base_url=BASE_URL,
        personal_access_token="rumor",
        release_note_prefix="= Changelog =",
    )


@pytest.fixture
def store(settings: Settings) -> ConfigurationStore:
    return ConfigurationStore(settings)


@pytest.fixture
def server() -> FakeAdoServer:
    return FakeAdoServer()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary global config file with sample values."""
    config_file = tmp_path / ".adolinks-config"
    config_file.write_text(
        """# adolinks configuration
ADO_ENABLED="true"
ADO_BASE_URL="https://dev.azure.com/contoso/"
ADO_PERSONAL_ACCESS_TOKEN="global-token"
ADO_RELEASE_NOTE_PREFIX='= Changelog ='
"""
    )
    return config_file
