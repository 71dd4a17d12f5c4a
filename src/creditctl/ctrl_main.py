"""Command line controller for a credit-network node."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from creditctl.application.funds.dtos import SendFundsResultDTO
from creditctl.client.funds import funds_send, parse_send_args, print_payment_report
from creditctl.crypto.keys import PublicKey
from creditctl.domain.errors import CtrlError, FundsError, ReceiptAckError
from creditctl.envs.ctrl_env import (
    Settings,
    get_settings,
    load_identity,
    load_node_ticket,
)
from creditctl.infrastructure.node.node_client import NodeConnection

EXIT_OK = 0
EXIT_FAILURE = 1
# Payment delivered but the receipt could not be acknowledged
EXIT_PAYMENT_UNCONFIRMED = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="creditctl",
        description="A command line client for a credit-network node",
    )
    parser.add_argument("-I", "--idfile", help="Client identity file path")
    parser.add_argument(
        "-T", "--ticket", dest="node_ticket", help="Node ticket file path"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    funds = subparsers.add_parser("funds", help="Send funds through the network")
    funds_subparsers = funds.add_subparsers(dest="funds_command", required=True)

    send = funds_subparsers.add_parser(
        "send", help="Send funds to a remote destination"
    )
    send.add_argument(
        "-d", "--destination", required=True, help="recipient's public key"
    )
    send.add_argument(
        "-a", "--amount", required=True, help="Amount of credits to send"
    )
    return parser


async def run_funds_send(
    settings: Settings, destination: PublicKey, amount: int
) -> SendFundsResultDTO:
    identity = load_identity(settings.idfile)
    node_ticket = load_node_ticket(settings.node_ticket_file)

    node_connection = await NodeConnection.connect(
        node_ticket, identity, timeout=settings.request_timeout
    )
    async with node_connection:
        return await funds_send(node_connection, destination, amount)


def _report_error(e: Exception) -> None:
    print(f"error: {type(e).__name__}: {e}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.idfile, args.node_ticket)
    except (CtrlError, ValueError) as e:
        _report_error(e)
        return EXIT_FAILURE

    logging.basicConfig(level=settings.log_level)

    try:
        destination, amount = parse_send_args(args.destination, args.amount)
        # One event loop for this single command invocation
        result = asyncio.run(run_funds_send(settings, destination, amount))
    except ReceiptAckError as e:
        _report_error(e)
        print(
            "Funds were most likely delivered, but the payment is not confirmed.",
            file=sys.stderr,
        )
        return EXIT_PAYMENT_UNCONFIRMED
    except (FundsError, CtrlError) as e:
        _report_error(e)
        return EXIT_FAILURE

    print_payment_report(result)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
