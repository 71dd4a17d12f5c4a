"""Protocol interfaces for the node connection and its capabilities.

These protocols define the contract the funds use case relies on. They make the
orchestrator testable with in-memory implementations and keep it independent of
the transport used to reach the node.

Collaborators report failures by raising ``NodeRequestError``. A capability the
connected application has no permission for is represented by ``None``, never
by an exception.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ...crypto.keys import PublicKey
    from ..funds.entities import (
        FriendsRoute,
        InvoiceId,
        NodeReport,
        Receipt,
        RequestId,
        RouteWithCapacity,
    )


class ReportMutations(Protocol):
    """Live stream of node report mutations.

    Must be closed by whoever obtains it, even if it is never read.
    """

    def __aiter__(self) -> AsyncIterator[Any]: ...

    async def aclose(self) -> None:
        """Unsubscribe and release the underlying connection."""
        ...


class AppReportProtocol(Protocol):
    async def incoming_reports(self) -> "tuple[NodeReport, ReportMutations]":
        """Fetch a report snapshot together with a stream of later mutations.

        Raises:
            NodeRequestError: If the snapshot could not be fetched
        """
        ...


class AppRoutesProtocol(Protocol):
    async def request_routes(
        self,
        amount: int,
        source: "PublicKey",
        destination: "PublicKey",
        opt_exclude: Optional[tuple["PublicKey", "PublicKey"]],
    ) -> "list[RouteWithCapacity]":
        """Ask the routing oracle for routes able to carry ``amount``.

        Args:
            amount: Credits to move from source to destination
            source: Paying node
            destination: Receiving node
            opt_exclude: Optional directed edge to leave out of the search

        Returns:
            Candidate routes in the oracle's order of preference

        Raises:
            NodeRequestError: On connectivity or oracle-side failure
        """
        ...


class AppSendFundsProtocol(Protocol):
    async def request_send_funds(
        self,
        request_id: "RequestId",
        route: "FriendsRoute",
        invoice_id: "InvoiceId",
        dest_payment: int,
    ) -> "Receipt":
        """Push ``dest_payment`` credits along ``route``.

        Raises:
            NodeRequestError: If the payment was not delivered
        """
        ...

    async def receipt_ack(self, request_id: "RequestId", receipt: "Receipt") -> None:
        """Confirm to the node that the receipt for ``request_id`` was received.

        Raises:
            NodeRequestError: If the acknowledgment did not reach the node
        """
        ...


class NodeConnectionProtocol(Protocol):
    """An open connection to a node, exposing the capabilities it grants."""

    def report(self) -> AppReportProtocol: ...

    def routes(self) -> Optional[AppRoutesProtocol]:
        """Routing capability, or None without routes permission."""
        ...

    def send_funds(self) -> Optional[AppSendFundsProtocol]:
        """Funds capability, or None without send-funds permission."""
        ...
