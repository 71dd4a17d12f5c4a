"""Funds domain entities: routes, capacities, identifiers and receipts."""

from __future__ import annotations

import secrets
from typing import Any, NewType

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_serializer,
    field_validator,
)

from ...crypto.keys import (
    PublicKey,
    b64_decode,
    b64_encode,
    public_key_from_bytes,
    public_key_to_string,
    string_to_public_key,
)
from ..amount import MAX_AMOUNT

UID_LEN = 16
INVOICE_ID_LEN = 32

RequestId = NewType("RequestId", bytes)
InvoiceId = NewType("InvoiceId", bytes)


def gen_uid() -> RequestId:
    """Generate a fresh request identifier from the OS CSPRNG."""
    return RequestId(secrets.token_bytes(UID_LEN))


def trivial_invoice_id() -> InvoiceId:
    return InvoiceId(bytes(INVOICE_ID_LEN))


def _coerce_public_key(value: Any) -> PublicKey:
    if isinstance(value, str):
        return string_to_public_key(value)
    if isinstance(value, (bytes, bytearray)):
        return public_key_from_bytes(bytes(value))
    raise ValueError(f"Unsupported public key value: {type(value).__name__}")


def _coerce_fixed_bytes(value: Any, length: int, name: str) -> bytes:
    raw = b64_decode(value) if isinstance(value, str) else value
    if not isinstance(raw, (bytes, bytearray)) or len(raw) != length:
        raise ValueError(f"{name} must be {length} bytes")
    return bytes(raw)


class FriendsRoute(RootModel[list[PublicKey]]):
    """Public keys from source to destination, in traversal order.

    Routes shorter than two entries are representable so that route
    selection can skip them, but they cannot carry a payment.
    """

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="before")
    @classmethod
    def validate_public_keys(cls, v: Any) -> list[PublicKey]:
        if not isinstance(v, (list, tuple)):
            raise ValueError("Route must be a list of public keys")
        return [_coerce_public_key(item) for item in v]

    @field_serializer("root")
    def serialize_public_keys(self, value: list[PublicKey]) -> list[str]:
        return [public_key_to_string(pk) for pk in value]

    def __len__(self) -> int:
        return len(self.root)

    @property
    def public_keys(self) -> list[PublicKey]:
        return list(self.root)


class RouteWithCapacity(BaseModel):
    """A candidate route and the largest total (payment + fees) it can carry."""

    model_config = ConfigDict(frozen=True)

    route: FriendsRoute
    capacity: int = Field(..., ge=0, le=MAX_AMOUNT)


class FunderReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    local_public_key: PublicKey

    @field_validator("local_public_key", mode="before")
    @classmethod
    def validate_local_public_key(cls, v: Any) -> PublicKey:
        return _coerce_public_key(v)

    @field_serializer("local_public_key")
    def serialize_local_public_key(self, value: PublicKey) -> str:
        return public_key_to_string(value)


class NodeReport(BaseModel):
    """Snapshot of the node state. Only the funder section is interpreted."""

    model_config = ConfigDict(extra="allow")

    funder_report: FunderReport


class Receipt(BaseModel):
    """Proof of payment issued by the destination.

    Handed back to the node unchanged when acknowledging it: ``invoice_id``
    keeps the exact base64 text the node sent, and fields the node adds
    beyond these are preserved.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    response_hash: str
    invoice_id: str
    dest_payment: int = Field(..., ge=0, le=MAX_AMOUNT)
    signature: str

    @field_validator("invoice_id", mode="before")
    @classmethod
    def validate_invoice_id(cls, v: Any) -> str:
        raw = _coerce_fixed_bytes(v, INVOICE_ID_LEN, "invoice_id")
        return v if isinstance(v, str) else b64_encode(raw)

    @property
    def invoice_id_bytes(self) -> InvoiceId:
        return InvoiceId(b64_decode(self.invoice_id))
