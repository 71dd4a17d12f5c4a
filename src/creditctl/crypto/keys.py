from __future__ import annotations

import base64
import binascii
from typing import NewType

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

PUBLIC_KEY_LEN = 32

# Raw Ed25519 public key bytes identifying a network participant
PublicKey = NewType("PublicKey", bytes)


def b64_encode(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64_decode(text: str) -> bytes:
    """Decode URL-safe base64, with or without padding."""
    stripped = text.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64 encoding: {e}") from e


def public_key_from_bytes(raw: bytes) -> PublicKey:
    """Validate raw bytes as an Ed25519 public key."""
    if len(raw) != PUBLIC_KEY_LEN:
        raise ValueError(
            f"Public key must be {PUBLIC_KEY_LEN} bytes, got {len(raw)}"
        )
    Ed25519PublicKey.from_public_bytes(raw)
    return PublicKey(bytes(raw))


def string_to_public_key(text: str) -> PublicKey:
    if not text:
        raise ValueError("Public key string cannot be empty")
    return public_key_from_bytes(b64_decode(text))


def public_key_to_string(public_key: bytes) -> str:
    return b64_encode(public_key)


def load_private_key_from_pem(private_key_pem: str) -> Ed25519PrivateKey:
    """Load an application identity (PKCS8 PEM, Ed25519)."""
    private_key = serialization.load_pem_private_key(
        private_key_pem.encode(),
        password=None,
    )
    if not isinstance(private_key, Ed25519PrivateKey):
        raise ValueError("Identity key must be an Ed25519 private key")
    return private_key


def public_key_of(private_key: Ed25519PrivateKey) -> PublicKey:
    raw = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return PublicKey(raw)


def sign_bytes(private_key: Ed25519PrivateKey, data: bytes) -> str:
    """Sign data with the identity key; returns the signature in URL-safe base64."""
    return b64_encode(private_key.sign(data))
