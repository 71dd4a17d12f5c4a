"""Use case for pushing funds to a remote destination."""

from __future__ import annotations

import logging

from ....crypto.keys import PublicKey, public_key_to_string
from ....domain.amount import is_valid_amount
from ....domain.errors import (
    AppRoutesError,
    GetReportError,
    NodeRequestError,
    NoFundsPermissionsError,
    NoRoutesPermissionsError,
    ParseAmountError,
    ReceiptAckError,
    SendFundsError,
)
from ....domain.funds.entities import gen_uid, trivial_invoice_id
from ....domain.shared import NodeConnectionProtocol
from ..dtos import SendFundsResultDTO
from ..route_selection import choose_route, route_fees

logger = logging.getLogger(__name__)


class FundsService:
    """Drives one payment attempt from amount and destination to an acknowledged receipt.

    The service keeps no state between calls; concurrent ``send`` calls are
    independent and may race for the same route capacity.
    """

    def __init__(self, node_connection: NodeConnectionProtocol):
        self.node_connection = node_connection

    async def _local_public_key(self) -> PublicKey:
        app_report = self.node_connection.report()
        try:
            node_report, mutations = await app_report.incoming_reports()
        except NodeRequestError as e:
            raise GetReportError(f"Failed to fetch node report: {e}") from e

        # Live report mutations are not needed for a single payment
        await mutations.aclose()

        return node_report.funder_report.local_public_key

    async def send(self, destination: PublicKey, amount: int) -> SendFundsResultDTO:
        """Send ``amount`` credits to ``destination``.

        Raises:
            GetReportError: Report snapshot unavailable
            NoFundsPermissionsError, NoRoutesPermissionsError: Missing capability
            AppRoutesError: The routing oracle failed
            NoSuitableRouteError: No candidate can carry amount plus fees
            SendFundsError: Payment not delivered, no funds assumed moved
            ReceiptAckError: Payment delivered but the receipt was not acknowledged
        """
        if not is_valid_amount(amount):
            raise ParseAmountError(f"Amount out of range: {amount}")

        # 1) Snapshot of our own identity on the network
        local_public_key = await self._local_public_key()

        # 2) Both capabilities are required before anything is attempted
        app_send_funds = self.node_connection.send_funds()
        if app_send_funds is None:
            raise NoFundsPermissionsError("Application has no send funds permissions")
        app_routes = self.node_connection.routes()
        if app_routes is None:
            raise NoRoutesPermissionsError("Application has no routes permissions")

        # 3) Candidate routes, no edge excluded
        try:
            routes_with_capacity = await app_routes.request_routes(
                amount, local_public_key, destination, None
            )
        except NodeRequestError as e:
            raise AppRoutesError(f"Failed to request routes: {e}") from e

        # 4) Capacities are a snapshot and are not re-checked before sending
        route = choose_route(routes_with_capacity, amount)
        fees = route_fees(route)

        # 5) A trivial invoice
        request_id = gen_uid()
        invoice_id = trivial_invoice_id()

        logger.info(
            "Sending %d credits to %s over %d hops",
            amount,
            public_key_to_string(destination),
            len(route) - 1,
        )

        # 6) Push the funds
        try:
            receipt = await app_send_funds.request_send_funds(
                request_id, route, invoice_id, amount
            )
        except NodeRequestError as e:
            raise SendFundsError(f"Failed to send funds: {e}") from e

        # 7) Finalize: the node holds the payment open until the receipt is acked
        try:
            await app_send_funds.receipt_ack(request_id, receipt)
        except NodeRequestError as e:
            raise ReceiptAckError(
                f"Payment was delivered but acknowledging the receipt failed: {e}",
                request_id=request_id,
                fees=fees,
            ) from e

        return SendFundsResultDTO(
            destination=destination,
            amount=amount,
            fees=fees,
            route=route,
            request_id=request_id,
        )
