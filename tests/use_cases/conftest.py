"""Pytest fixtures for use case tests."""

from __future__ import annotations

import pytest

from creditctl.application.funds.use_cases.send_funds import FundsService
from creditctl.crypto.keys import PublicKey
from tests.fixtures import InMemoryNode


@pytest.fixture
def node(local_public_key: PublicKey) -> InMemoryNode:
    """In-memory node with full permissions and no candidate routes yet."""
    return InMemoryNode(local_public_key=local_public_key)


@pytest.fixture
def funds_service(node: InMemoryNode) -> FundsService:
    return FundsService(node)
