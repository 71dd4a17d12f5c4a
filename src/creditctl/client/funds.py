"""Client helpers for the ``funds`` command family."""

from __future__ import annotations

import re

from creditctl.application.funds.dtos import SendFundsResultDTO
from creditctl.application.funds.use_cases.send_funds import FundsService
from creditctl.crypto.keys import PublicKey, string_to_public_key
from creditctl.domain.amount import is_valid_amount
from creditctl.domain.errors import InvalidDestinationError, ParseAmountError
from creditctl.domain.shared import NodeConnectionProtocol

_AMOUNT_RE = re.compile(r"\+?[0-9]+")


def parse_amount(amount_str: str) -> int:
    """Parse an unsigned 128-bit decimal amount."""
    if not _AMOUNT_RE.fullmatch(amount_str):
        raise ParseAmountError(f"Invalid amount: {amount_str!r}")
    amount = int(amount_str)
    if not is_valid_amount(amount):
        raise ParseAmountError(f"Amount does not fit in 128 bits: {amount_str}")
    return amount


def parse_destination(destination_str: str) -> PublicKey:
    try:
        return string_to_public_key(destination_str)
    except ValueError as e:
        raise InvalidDestinationError(f"Invalid destination public key: {e}") from e


def parse_send_args(destination_str: str, amount_str: str) -> tuple[PublicKey, int]:
    """Validate ``funds send`` input before anything touches the network.

    The amount is checked first, matching the order the controller reports
    errors in.
    """
    amount = parse_amount(amount_str)
    destination = parse_destination(destination_str)
    return destination, amount


async def funds_send(
    node_connection: NodeConnectionProtocol,
    destination: PublicKey,
    amount: int,
) -> SendFundsResultDTO:
    service = FundsService(node_connection)
    return await service.send(destination, amount)


def print_payment_report(result: SendFundsResultDTO) -> None:
    print("Payment successful!")
    print(f"Fees: {result.fees}")
