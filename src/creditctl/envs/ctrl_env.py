from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from pydantic import BaseModel, ValidationError, field_validator

from creditctl.crypto.keys import (
    PublicKey,
    load_private_key_from_pem,
    string_to_public_key,
)
from creditctl.domain.errors import (
    IdFileDoesNotExistError,
    InvalidIdFileError,
    InvalidNodeTicketFileError,
    MissingIdFileArgumentError,
    MissingNodeTicketArgumentError,
    NodeTicketFileDoesNotExistError,
)

CREDITCTL_ID_FILE = "CREDITCTL_ID_FILE"
CREDITCTL_NODE_TICKET_FILE = "CREDITCTL_NODE_TICKET_FILE"
CREDITCTL_TIMEOUT = "CREDITCTL_TIMEOUT"
CREDITCTL_LOG_LEVEL = "CREDITCTL_LOG_LEVEL"


class Settings(BaseModel):
    """Typed controller settings built from flags and environment variables."""

    idfile: Path
    node_ticket_file: Path
    request_timeout: float = 10.0
    log_level: str = "WARNING"

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


class NodeTicket(BaseModel):
    """Contact information of the node: its public key and HTTP address."""

    public_key: str
    address: str

    @field_validator("public_key")
    @classmethod
    def validate_public_key(cls, v: str) -> str:
        string_to_public_key(v)
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        if not v:
            raise ValueError("Node address cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Node address must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Node address must include a host")
        return v

    @property
    def node_public_key(self) -> PublicKey:
        return string_to_public_key(self.public_key)


def get_settings(
    idfile: Optional[str] = None,
    node_ticket_file: Optional[str] = None,
) -> Settings:
    """Return settings; explicit arguments win over environment variables."""
    idfile = idfile or os.environ.get(CREDITCTL_ID_FILE)
    if not idfile:
        raise MissingIdFileArgumentError(
            f"Identity file is required (--idfile or {CREDITCTL_ID_FILE})"
        )
    node_ticket_file = node_ticket_file or os.environ.get(CREDITCTL_NODE_TICKET_FILE)
    if not node_ticket_file:
        raise MissingNodeTicketArgumentError(
            f"Node ticket file is required (--ticket or {CREDITCTL_NODE_TICKET_FILE})"
        )
    return Settings(
        idfile=Path(idfile),
        node_ticket_file=Path(node_ticket_file),
        request_timeout=float(os.environ.get(CREDITCTL_TIMEOUT, "10.0")),
        log_level=os.environ.get(CREDITCTL_LOG_LEVEL, "WARNING"),
    )


def load_identity(path: Path) -> Ed25519PrivateKey:
    if not path.exists():
        raise IdFileDoesNotExistError(f"Identity file does not exist: {path}")
    try:
        return load_private_key_from_pem(path.read_text(encoding="utf-8"))
    except (
        OSError,
        ValueError,
        TypeError,
        UnicodeDecodeError,
        UnsupportedAlgorithm,
    ) as e:
        raise InvalidIdFileError(f"Invalid identity file {path}: {e}") from e


def load_node_ticket(path: Path) -> NodeTicket:
    if not path.exists():
        raise NodeTicketFileDoesNotExistError(f"Node ticket file does not exist: {path}")
    try:
        return NodeTicket.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        raise InvalidNodeTicketFileError(f"Invalid node ticket file {path}: {e}") from e
