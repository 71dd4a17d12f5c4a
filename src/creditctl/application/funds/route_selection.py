"""Pure route selection for funds transfers.

A route of length 2 (source and destination only) costs nothing; every
intermediary on the route charges one credit, regardless of the amount.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ...domain.amount import checked_add, checked_sub
from ...domain.errors import InvalidRouteError, NoSuitableRouteError
from ...domain.funds.entities import FriendsRoute, RouteWithCapacity

logger = logging.getLogger(__name__)


def route_fees(route: FriendsRoute) -> int:
    """Credits paid to intermediaries when pushing funds along ``route``.

    Raises:
        InvalidRouteError: If the route has fewer than two entries
    """
    fees = checked_sub(len(route), 2)
    if fees is None:
        raise InvalidRouteError(f"Route of length {len(route)} cannot carry a payment")
    return fees


def choose_route(
    routes_with_capacity: Iterable[RouteWithCapacity], amount: int
) -> FriendsRoute:
    """Choose a route for pushing ``amount`` credits.

    The first candidate (in the given order) whose capacity covers
    ``amount`` plus its fees wins. Invalid and overflowing candidates are
    skipped, never fatal.

    Raises:
        NoSuitableRouteError: If no candidate can carry the payment
    """
    for route_with_capacity in routes_with_capacity:
        route = route_with_capacity.route

        fees = checked_sub(len(route), 2)
        if fees is None:
            logger.warning(
                "Received invalid route of length: %d. Skipping route", len(route)
            )
            continue

        total = checked_add(fees, amount)
        if total is None:
            logger.warning("Overflow when calculating total payment. Skipping route")
            continue

        if total <= route_with_capacity.capacity:
            return route

    raise NoSuitableRouteError(f"No route can carry {amount} credits plus fees")
