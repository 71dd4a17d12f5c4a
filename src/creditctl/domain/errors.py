"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Optional


class NodeRequestError(Exception):
    """Raised by node collaborators when a request to the node fails."""


# ---------- Funds ----------


class FundsError(Exception):
    """Base class for every failure of a funds command."""


class GetReportError(FundsError):
    """Raised when the node report snapshot could not be fetched."""


class PermissionDeniedError(FundsError):
    """Raised when the connected application lacks a required capability."""


class NoFundsPermissionsError(PermissionDeniedError):
    """Raised when the application may not send funds."""


class NoRoutesPermissionsError(PermissionDeniedError):
    """Raised when the application may not query routes."""


class InvalidDestinationError(FundsError):
    """Raised when the destination is not a valid public key."""


class ParseAmountError(FundsError):
    """Raised when the amount is not a valid unsigned 128-bit integer."""


class AppRoutesError(FundsError):
    """Raised when the routing oracle fails to return candidate routes."""


class InvalidRouteError(FundsError):
    """Raised when a route is too short to carry a payment."""


class NoSuitableRouteError(FundsError):
    """Raised when no candidate route can carry the amount plus fees."""


class SendFundsError(FundsError):
    """Raised when the send request fails. No funds are assumed moved."""


class ReceiptAckError(FundsError):
    """Raised when a receipt was obtained but acknowledging it failed.

    The payment has most likely completed, but the node was not told that
    the receipt was received.
    """

    def __init__(
        self,
        message: str,
        *,
        request_id: Optional[bytes] = None,
        fees: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.fees = fees


# ---------- Controller setup ----------


class CtrlError(Exception):
    """Base class for failures before a command reaches the node."""


class MissingIdFileArgumentError(CtrlError):
    """Raised when no identity file was given."""


class IdFileDoesNotExistError(CtrlError):
    """Raised when the identity file path does not exist."""


class InvalidIdFileError(CtrlError):
    """Raised when the identity file does not hold a usable private key."""


class MissingNodeTicketArgumentError(CtrlError):
    """Raised when no node ticket file was given."""


class NodeTicketFileDoesNotExistError(CtrlError):
    """Raised when the node ticket file path does not exist."""


class InvalidNodeTicketFileError(CtrlError):
    """Raised when the node ticket file cannot be parsed."""


class NodeConnectionError(CtrlError):
    """Raised when connecting to the node fails."""
