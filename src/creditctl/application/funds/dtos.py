"""Data Transfer Objects for the funds application layer.

Request/response bodies exchanged with the node live here next to the result
reported to the operator.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ...crypto.keys import PublicKey, b64_encode, public_key_to_string
from ...domain.amount import MAX_AMOUNT
from ...domain.funds.entities import FriendsRoute, Receipt, RouteWithCapacity


class SendFundsResultDTO(BaseModel):
    """Outcome of a completed (sent and acknowledged) payment."""

    model_config = ConfigDict(frozen=True)

    destination: PublicKey
    amount: int
    fees: int
    route: FriendsRoute
    request_id: bytes

    @field_serializer("destination")
    def serialize_destination(self, value: PublicKey) -> str:
        return public_key_to_string(value)

    @field_serializer("request_id")
    def serialize_request_id(self, value: bytes) -> str:
        return b64_encode(value)


# ---------- Node API bodies ----------


class AppPermissionsDTO(BaseModel):
    """Capabilities granted to this application by the node."""

    routes: bool = False
    send_funds: bool = False


class NodePublicKeyDTO(BaseModel):
    public_key: str


class RequestRoutesDTO(BaseModel):
    amount: int = Field(..., ge=0, le=MAX_AMOUNT)
    source: str
    destination: str
    opt_exclude: Optional[tuple[str, str]] = None


class RoutesResponseDTO(BaseModel):
    routes: list[RouteWithCapacity]


class RequestSendFundsDTO(BaseModel):
    request_id: str
    route: FriendsRoute
    invoice_id: str
    dest_payment: int = Field(..., ge=0, le=MAX_AMOUNT)


class SendFundsResponseDTO(BaseModel):
    """Result of a send request: a receipt, or the node reporting the failure."""

    result: Literal["success", "failure"]
    receipt: Optional[Receipt] = None
    reporting_public_key: Optional[str] = None


class ReceiptAckDTO(BaseModel):
    receipt: Receipt
