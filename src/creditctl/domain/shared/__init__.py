"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .node_connection_protocol import (
    AppReportProtocol,
    AppRoutesProtocol,
    AppSendFundsProtocol,
    NodeConnectionProtocol,
    ReportMutations,
)

__all__ = [
    "AppReportProtocol",
    "AppRoutesProtocol",
    "AppSendFundsProtocol",
    "NodeConnectionProtocol",
    "ReportMutations",
]
