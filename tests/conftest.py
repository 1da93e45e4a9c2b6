"""Pytest fixtures for Idea Vault tests."""

import pytest

from ideavault.config import VaultConfig
from ideavault.ledger import LedgerWriter
from ideavault.paths import VaultPaths
from ideavault.service import IdeaVault
from ideavault.storage import MemoryBackend, SqliteBackend
from ideavault.store import RecordStore


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = 1_701_234_567_890):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def temp_vault(tmp_path):
    """Create a temporary vault root for testing.

    Args:
        tmp_path: pytest's built-in temporary directory fixture

    Returns:
        Path to temporary vault root
    """
    vault_root = tmp_path / "test_vault"
    vault_root.mkdir()
    return vault_root


@pytest.fixture
def vault_config(temp_vault):
    """VaultConfig pointing to the temporary vault."""
    return VaultConfig(vault_path=temp_vault)


@pytest.fixture
def vault_paths(vault_config):
    """VaultPaths for the temporary vault, with directories and ledger created."""
    paths = VaultPaths.from_config(vault_config)

    for directory in paths.get_all_directories():
        directory.mkdir(parents=True, exist_ok=True)

    paths.ledger_file.touch()

    return paths


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    """Every store test runs against both backends."""
    if request.param == "memory":
        return MemoryBackend()
    return SqliteBackend(tmp_path / "state" / "ideas.sqlite")


@pytest.fixture
def store(backend, clock):
    return RecordStore(backend, clock=clock)


@pytest.fixture
def vault(backend, vault_paths):
    """IdeaVault facade with a ledger in the temporary vault."""
    return IdeaVault(backend, ledger=LedgerWriter(vault_paths.ledger_file))
