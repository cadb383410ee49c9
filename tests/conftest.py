"""
Shared pytest fixtures for tessera tests.

This module provides:
- Log context cleanup for test isolation
- Fake signers identified by public key
- An in-memory RPC collaborator
- Clients with and without the system plugin

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments:

    @pytest.mark.asyncio
    async def test_something(client, rpc, alice):
        ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from tessera import Tessera
from tessera.core.logging import clear_context
from tessera.core.settings import TesseraSettings
from tessera.plugins import SystemPlugin
from tests._support import FakeSigner, InMemoryRpc


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        # Plugin tests drive a full client end to end
        if "plugins" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    """Each test starts and ends with an empty log context."""
    clear_context()
    yield
    clear_context()


# =============================================================================
# Ledger fixtures
# =============================================================================


@pytest.fixture
def alice() -> FakeSigner:
    return FakeSigner("Alice1111111111111111111111111111111111111", "alice")


@pytest.fixture
def bob() -> FakeSigner:
    return FakeSigner("Bob111111111111111111111111111111111111111", "bob")


@pytest.fixture
def carol() -> FakeSigner:
    return FakeSigner("Carol11111111111111111111111111111111111111", "carol")


@pytest.fixture
def rpc() -> InMemoryRpc:
    return InMemoryRpc()


# =============================================================================
# Client fixtures
# =============================================================================


@pytest.fixture
def settings() -> TesseraSettings:
    """Settings isolated from any .env file, with a small batch size."""
    return TesseraSettings(_env_file=None, commitment="confirmed", gma_chunk_size=2, fail_silently=False)


@pytest.fixture
def bare_client(rpc, alice, settings) -> Tessera:
    """Client with no plugin installed."""
    return Tessera(rpc, identity=alice, settings=settings)


@pytest.fixture
def client(bare_client) -> Tessera:
    """Client with the system plugin installed."""
    return bare_client.use(SystemPlugin())
