"""
PetReport Client
==================

What:  The client side of the request boundary: every call from the client to
       the backend goes through one RequestGateway.

    from petreport.client import MemorySessionStorage, RequestGateway

    async with RequestGateway(storage=MemorySessionStorage()) as gateway:
        result = await gateway.post_request("/v1/users/login", {...})
"""

from petreport.client.base import Navigator, Notifier, SessionStorage
from petreport.client.gateway import (
    InFlightRequestGuard,
    RequestGateway,
    RequestKind,
    ResponseCode,
)
from petreport.client.session import (
    HistoryNavigator,
    LoggingNotifier,
    MemorySessionStorage,
    SessionCredential,
    sign_in,
    sign_out,
)

__all__ = [
    "HistoryNavigator",
    "InFlightRequestGuard",
    "LoggingNotifier",
    "MemorySessionStorage",
    "Navigator",
    "Notifier",
    "RequestGateway",
    "RequestKind",
    "ResponseCode",
    "SessionCredential",
    "SessionStorage",
    "sign_in",
    "sign_out",
]
