"""Shared pytest fixtures for controller tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from creditctl.crypto.keys import PublicKey, public_key_of, public_key_to_string
from tests.fixtures import make_public_key


@pytest.fixture
def identity_private_key() -> Ed25519PrivateKey:
    """Generate an application identity for testing."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def identity_private_key_pem(identity_private_key: Ed25519PrivateKey) -> str:
    """Get the application identity as PEM string."""
    pem = identity_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return pem.decode("utf-8")


@pytest.fixture
def node_private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def node_public_key(node_private_key: Ed25519PrivateKey) -> PublicKey:
    return public_key_of(node_private_key)


@pytest.fixture
def local_public_key() -> PublicKey:
    """Public key of the paying node."""
    return make_public_key()


@pytest.fixture
def destination_public_key() -> PublicKey:
    return make_public_key()


@pytest.fixture
def idfile(tmp_path: Path, identity_private_key_pem: str) -> Path:
    path = tmp_path / "app.ident"
    path.write_text(identity_private_key_pem, encoding="utf-8")
    return path


@pytest.fixture
def node_ticket_file(tmp_path: Path, node_public_key: PublicKey) -> Path:
    path = tmp_path / "node.ticket"
    path.write_text(
        json.dumps(
            {
                "public_key": public_key_to_string(node_public_key),
                "address": "http://node.test:9000/api/v1",
            }
        ),
        encoding="utf-8",
    )
    return path
