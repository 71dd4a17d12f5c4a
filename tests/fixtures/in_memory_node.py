"""In-memory node connection for testing the funds use case."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional, Type
from types import TracebackType

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from creditctl.crypto.keys import PublicKey
from creditctl.domain.errors import NodeRequestError
from creditctl.domain.funds.entities import (
    FriendsRoute,
    FunderReport,
    InvoiceId,
    NodeReport,
    Receipt,
    RequestId,
    RouteWithCapacity,
)


def make_public_key() -> PublicKey:
    """Generate a fresh, valid participant public key."""
    raw = (
        Ed25519PrivateKey.generate()
        .public_key()
        .public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    )
    return PublicKey(raw)


def route_with_capacity(keys: list[PublicKey], capacity: int) -> RouteWithCapacity:
    return RouteWithCapacity(route=FriendsRoute(keys), capacity=capacity)


class InMemoryReportMutations:
    """Mutation stream that records whether it was closed."""

    def __init__(self, mutations: Optional[list[Any]] = None) -> None:
        self._mutations = list(mutations or [])
        self.closed = False

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iter_mutations()

    async def _iter_mutations(self) -> AsyncIterator[Any]:
        for mutation in self._mutations:
            if self.closed:
                return
            yield mutation

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class SendFundsCall:
    request_id: RequestId
    route: FriendsRoute
    invoice_id: InvoiceId
    dest_payment: int


class InMemoryAppReport:
    def __init__(self, node: "InMemoryNode") -> None:
        self._node = node

    async def incoming_reports(self) -> tuple[NodeReport, InMemoryReportMutations]:
        self._node.calls.append("incoming_reports")
        if self._node.fail_report:
            raise NodeRequestError("report unavailable")
        mutations = InMemoryReportMutations([{"mutation": "noop"}])
        self._node.mutation_streams.append(mutations)
        report = NodeReport(
            funder_report=FunderReport(local_public_key=self._node.local_public_key)
        )
        return report, mutations


class InMemoryAppRoutes:
    def __init__(self, node: "InMemoryNode") -> None:
        self._node = node

    async def request_routes(
        self,
        amount: int,
        source: PublicKey,
        destination: PublicKey,
        opt_exclude: Optional[tuple[PublicKey, PublicKey]],
    ) -> list[RouteWithCapacity]:
        self._node.calls.append("request_routes")
        self._node.route_requests.append((amount, source, destination, opt_exclude))
        if self._node.fail_routes:
            raise NodeRequestError("routing oracle unreachable")
        return list(self._node.candidate_routes)


class InMemoryAppSendFunds:
    def __init__(self, node: "InMemoryNode") -> None:
        self._node = node

    async def request_send_funds(
        self,
        request_id: RequestId,
        route: FriendsRoute,
        invoice_id: InvoiceId,
        dest_payment: int,
    ) -> Receipt:
        self._node.calls.append("request_send_funds")
        self._node.send_requests.append(
            SendFundsCall(request_id, route, invoice_id, dest_payment)
        )
        # Let concurrent attempts interleave
        await asyncio.sleep(0)
        if self._node.fail_send:
            raise NodeRequestError("rejected by intermediary")
        return Receipt(
            response_hash="cmVzcG9uc2U",
            invoice_id=invoice_id,
            dest_payment=dest_payment,
            signature="c2lnbmF0dXJl",
        )

    async def receipt_ack(self, request_id: RequestId, receipt: Receipt) -> None:
        self._node.calls.append("receipt_ack")
        self._node.acks.append((request_id, receipt))
        if self._node.fail_ack:
            raise NodeRequestError("connection lost")


@dataclass
class InMemoryNode:
    """Node connection double with switchable permissions and failures."""

    local_public_key: PublicKey
    candidate_routes: list[RouteWithCapacity] = field(default_factory=list)
    routes_permission: bool = True
    send_funds_permission: bool = True
    fail_report: bool = False
    fail_routes: bool = False
    fail_send: bool = False
    fail_ack: bool = False
    calls: list[str] = field(default_factory=list)
    route_requests: list[tuple] = field(default_factory=list)
    send_requests: list[SendFundsCall] = field(default_factory=list)
    acks: list[tuple[RequestId, Receipt]] = field(default_factory=list)
    mutation_streams: list[InMemoryReportMutations] = field(default_factory=list)
    closed: bool = False

    def report(self) -> InMemoryAppReport:
        return InMemoryAppReport(self)

    def routes(self) -> Optional[InMemoryAppRoutes]:
        return InMemoryAppRoutes(self) if self.routes_permission else None

    def send_funds(self) -> Optional[InMemoryAppSendFunds]:
        return InMemoryAppSendFunds(self) if self.send_funds_permission else None

    async def aclose(self) -> None:
        self.closed = True

    async def __aenter__(self) -> "InMemoryNode":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
