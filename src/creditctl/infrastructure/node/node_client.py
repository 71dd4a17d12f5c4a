from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional, Type
from types import TracebackType

import httpx
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ...application.funds.dtos import (
    AppPermissionsDTO,
    NodePublicKeyDTO,
    ReceiptAckDTO,
    RequestRoutesDTO,
    RequestSendFundsDTO,
    RoutesResponseDTO,
    SendFundsResponseDTO,
)
from ...crypto.keys import PublicKey, b64_encode, public_key_to_string, string_to_public_key
from ...domain.errors import NodeConnectionError, NodeRequestError
from ...domain.funds.entities import (
    FriendsRoute,
    InvoiceId,
    NodeReport,
    Receipt,
    RequestId,
    RouteWithCapacity,
)
from ...envs.ctrl_env import NodeTicket
from ..http.http_client import AsyncHttpClient
from ..timing import log_node_call

logger = logging.getLogger(__name__)


class ReportMutationStream:
    """Newline-delimited JSON stream of node report mutations."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iter_mutations()

    async def _iter_mutations(self) -> AsyncIterator[Any]:
        try:
            async for line in self._response.aiter_lines():
                if line.strip():
                    yield json.loads(line)
        except (httpx.HTTPError, ValueError) as e:
            raise NodeRequestError(f"Report mutation stream failed: {e}") from e

    @property
    def is_closed(self) -> bool:
        return self._response.is_closed

    async def aclose(self) -> None:
        await self._response.aclose()


class AppReportClient:
    def __init__(self, http: AsyncHttpClient) -> None:
        self._http = http

    @log_node_call("N_incoming_reports")
    async def incoming_reports(self) -> tuple[NodeReport, ReportMutationStream]:
        try:
            resp = await self._http.get("/report")
            node_report = NodeReport.model_validate(resp.json())
            mutations = await self._http.stream_get("/report/mutations")
        except (httpx.HTTPError, ValueError) as e:
            raise NodeRequestError(f"Report request failed: {e}") from e
        return node_report, ReportMutationStream(mutations)


class AppRoutesClient:
    def __init__(self, http: AsyncHttpClient) -> None:
        self._http = http

    @log_node_call("N_request_routes")
    async def request_routes(
        self,
        amount: int,
        source: PublicKey,
        destination: PublicKey,
        opt_exclude: Optional[tuple[PublicKey, PublicKey]],
    ) -> list[RouteWithCapacity]:
        dto = RequestRoutesDTO(
            amount=amount,
            source=public_key_to_string(source),
            destination=public_key_to_string(destination),
            opt_exclude=(
                None
                if opt_exclude is None
                else (
                    public_key_to_string(opt_exclude[0]),
                    public_key_to_string(opt_exclude[1]),
                )
            ),
        )
        try:
            resp = await self._http.post(
                "/routes/requests", json=dto.model_dump(mode="json")
            )
            return RoutesResponseDTO.model_validate(resp.json()).routes
        except (httpx.HTTPError, ValueError) as e:
            raise NodeRequestError(f"Routes request failed: {e}") from e


class AppSendFundsClient:
    def __init__(self, http: AsyncHttpClient) -> None:
        self._http = http

    @log_node_call("N_request_send_funds")
    async def request_send_funds(
        self,
        request_id: RequestId,
        route: FriendsRoute,
        invoice_id: InvoiceId,
        dest_payment: int,
    ) -> Receipt:
        dto = RequestSendFundsDTO(
            request_id=b64_encode(request_id),
            route=route,
            invoice_id=b64_encode(invoice_id),
            dest_payment=dest_payment,
        )
        try:
            resp = await self._http.post(
                "/funds/requests", json=dto.model_dump(mode="json")
            )
            response = SendFundsResponseDTO.model_validate(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            raise NodeRequestError(f"Send funds request failed: {e}") from e

        if response.result == "failure" or response.receipt is None:
            reporter = response.reporting_public_key or "unknown node"
            raise NodeRequestError(f"Send funds failed, reported by {reporter}")
        return response.receipt

    @log_node_call("N_receipt_ack")
    async def receipt_ack(self, request_id: RequestId, receipt: Receipt) -> None:
        path = f"/funds/requests/{b64_encode(request_id)}/receipt-ack"
        dto = ReceiptAckDTO(receipt=receipt)
        try:
            await self._http.post(path, json=dto.model_dump(mode="json"))
        except httpx.HTTPError as e:
            raise NodeRequestError(f"Receipt ack failed: {e}") from e


class NodeConnection:
    """Connection to a node over its HTTP app API.

    Capabilities the node did not grant to this application are ``None``.
    """

    def __init__(self, http: AsyncHttpClient, permissions: AppPermissionsDTO) -> None:
        self._http = http
        self._report = AppReportClient(http)
        self._routes = AppRoutesClient(http) if permissions.routes else None
        self._send_funds = AppSendFundsClient(http) if permissions.send_funds else None

    @classmethod
    async def connect(
        cls,
        node_ticket: NodeTicket,
        identity: Ed25519PrivateKey,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "NodeConnection":
        http = AsyncHttpClient(
            node_ticket.address, identity, timeout=timeout, transport=transport
        )
        try:
            permissions = await cls._handshake(http, node_ticket)
        except NodeConnectionError:
            await http.aclose()
            raise
        return cls(http, permissions)

    @staticmethod
    @log_node_call("N_handshake")
    async def _handshake(
        http: AsyncHttpClient, node_ticket: NodeTicket
    ) -> AppPermissionsDTO:
        try:
            key_resp = await http.get("/node/public-key")
            node_key = NodePublicKeyDTO.model_validate(key_resp.json())
            if string_to_public_key(node_key.public_key) != node_ticket.node_public_key:
                raise NodeConnectionError("Node public key does not match the node ticket")
            perm_resp = await http.get("/app/permissions")
            permissions = AppPermissionsDTO.model_validate(perm_resp.json())
        except (httpx.HTTPError, ValueError) as e:
            raise NodeConnectionError(
                f"Failed to connect to node at {node_ticket.address}: {e}"
            ) from e
        logger.debug(
            "Connected to node; routes=%s send_funds=%s",
            permissions.routes,
            permissions.send_funds,
        )
        return permissions

    def report(self) -> AppReportClient:
        return self._report

    def routes(self) -> Optional[AppRoutesClient]:
        return self._routes

    def send_funds(self) -> Optional[AppSendFundsClient]:
        return self._send_funds

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "NodeConnection":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
