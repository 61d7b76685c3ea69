"""
PetReport Client — Request Gateway (Egress Gateway)
=====================================================

What:  The single entry point for every call the client makes to the backend.
How:   One RequestGateway per client process owns the httpx.AsyncClient, the
       in-flight guard and references to the session storage, navigator and
       notifier. Each call runs:

           dedup (JSON POST only) → token injection → transport
           → normalize → session-expiry check → return | raise

Call outcomes:
    idle → sent → returned body                 (normal)
                → TransportError                (network failure / HTTP error status)
                → SessionExpiredError           (forced logout, state already cleared)
    A duplicate JSON POST never reaches "sent": it returns
    {"status": False, "message": "Your request is already in process"}.

Browser context:
    Storage-dependent behaviour (token lookup, logout handling, navigation,
    notifications) only applies when a SessionStorage is attached. Without
    one the gateway behaves like a server-side renderer: anonymous calls,
    bodies returned as-is.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Mapping, Optional, Union

import httpx

from petreport.client.base import Navigator, Notifier, SessionStorage
from petreport.client.session import (
    HistoryNavigator,
    LoggingNotifier,
    SessionCredential,
)
from petreport.config import GatewaySettings
from petreport.exceptions import SessionExpiredError, TransportError

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST_MESSAGE = "Your request is already in process"
SESSION_EXPIRED_MESSAGE = "Your login session has expired. Please re-login."
SIGNIN_PATH = "/signin"
ROOT_PATH = "/"
NOTIFICATION_TIMEOUT_MS = 5000


class RequestKind(str, Enum):
    JSON_POST = "json_post"
    FILE_POST = "file_post"
    GET = "get"


class ResponseCode(IntEnum):
    """Application-level codes carried in the `statusCode` body field."""

    SESSION_EXPIRED = 700


@dataclass
class InFlightRequestGuard:
    """
    Single-slot record of the most recent JSON POST still in flight.

    Only one URL is tracked: starting a JSON POST overwrites the slot and
    settling any JSON POST empties it.
    """

    url: Optional[str] = None
    token: str = ""

    def is_in_flight(self, url: str) -> bool:
        return self.url is not None and self.url == url

    def acquire(self, url: str, token: str) -> None:
        self.url = url
        self.token = token

    def release(self) -> None:
        self.url = None


def _bearer(token: str) -> str:
    # Header values are whitespace-trimmed on the wire
    return f"Bearer {token}" if token else "Bearer"


def _is_absent(body: Any) -> bool:
    if body is None:
        return True
    return not isinstance(body, (dict, list)) and not body


class RequestGateway:
    """
    Async request gateway shared by every caller in the client.

    Args:
        api_url: Base URL; each call targets api_url + relative path.
            Defaults to GatewaySettings().api_url.
        storage: Session storage; None means "not in a browser context".
        navigator: View navigation (defaults to HistoryNavigator).
        notifier: User-facing notifications (defaults to LoggingNotifier).
        client: Transport to use; when omitted the gateway creates and owns one.
        guard: In-flight guard; pass one in to share it between gateways.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        storage: Optional[SessionStorage] = None,
        navigator: Optional[Navigator] = None,
        notifier: Optional[Notifier] = None,
        client: Optional[httpx.AsyncClient] = None,
        guard: Optional[InFlightRequestGuard] = None,
        settings: Optional[GatewaySettings] = None,
    ):
        config = settings or GatewaySettings()
        self.api_url = api_url if api_url is not None else config.api_url
        self.storage = storage
        self.navigator = navigator or HistoryNavigator()
        self.notifier = notifier or LoggingNotifier()
        self.guard = guard or InFlightRequestGuard()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.request_timeout)

    @property
    def in_browser(self) -> bool:
        return self.storage is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RequestGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── Public API ────────────────────────────────────────────────────────

    async def post_request(self, url: str, data: Any = None) -> Any:
        """POST `data` as JSON; duplicate submissions are suppressed."""
        return await self.send(RequestKind.JSON_POST, url, data)

    async def post_file_request(
        self, url: str, files: Mapping[str, Any], data: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """POST a multipart upload; `files` uses httpx's files= format."""
        return await self.send(RequestKind.FILE_POST, url, files, data=data)

    async def get_request(self, url: str) -> Any:
        return await self.send(RequestKind.GET, url)

    async def send(
        self,
        kind: Union[RequestKind, str],
        url: str,
        payload: Any = None,
        *,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Issue one call through the gateway.

        `kind` may be a RequestKind or its string value ("json_post", ...).

        Returns:
            The normalized response body, or the "already in process" body for
            a duplicate JSON POST.

        Raises:
            ValueError: `kind` is not a known request kind.
            TransportError: The call failed at the network or HTTP-status level.
            SessionExpiredError: The backend flagged the session as logged out.
                Storage is cleared and the sign-in view shown before raising.
        """
        kind = RequestKind(kind)
        token = SessionCredential.from_storage(self.storage).token
        guarded = kind is RequestKind.JSON_POST

        if guarded:
            if self.guard.is_in_flight(url):
                logger.info("Suppressed duplicate request to %s", url)
                return {"status": False, "message": DUPLICATE_REQUEST_MESSAGE}
            self.guard.acquire(url, token)

        try:
            body = await self._transport(kind, url, token, payload, data)
            result = self.normalize(body)
        finally:
            if guarded:
                self.guard.release()

        if self.in_browser and isinstance(result, Mapping) and result.get("logoutstatus"):
            self._force_logout(url)

        return result

    def normalize(self, body: Any) -> Any:
        """
        Turn a raw response body into what callers receive.

        A body with a falsy `status` and statusCode 700 means the session is
        gone: storage is cleared, the client hard-navigates to the root path
        and an empty dict is returned. Otherwise the body is returned as-is,
        or {} when it is absent.
        """
        if (
            self.in_browser
            and isinstance(body, Mapping)
            and not body.get("status")
            and body.get("statusCode") == ResponseCode.SESSION_EXPIRED
        ):
            logger.warning("Backend reported an expired session; resetting client")
            self.storage.clear()
            self.navigator.assign(ROOT_PATH)
            return {}
        return {} if _is_absent(body) else body

    def guard_route(self, route: Optional[str] = None) -> bool:
        """
        Allow entry to a protected view only for a signed-in session.

        Requires loginstatus == "true" and a non-empty token; otherwise the
        client is sent to the sign-in view and False is returned.
        """
        if SessionCredential.from_storage(self.storage).is_authenticated:
            return True
        logger.debug("Denied protected route %s", route or "(unnamed)")
        self.redirect_to(SIGNIN_PATH)
        return False

    def redirect_to(self, path: str) -> None:
        if self.in_browser:
            self.navigator.navigate(path)

    def alert(self, status: str, message: str) -> None:
        """Replace any visible notification with one for `status`."""
        if not self.in_browser:
            return

        self.notifier.clear()
        level = status.lower()
        if level == "success":
            self.notifier.show("success", message, "Success", NOTIFICATION_TIMEOUT_MS)
        elif level == "error":
            self.notifier.show("error", message, "Error", NOTIFICATION_TIMEOUT_MS)
        else:
            self.notifier.show("info", message, "Info", NOTIFICATION_TIMEOUT_MS)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _transport(
        self,
        kind: RequestKind,
        url: str,
        token: str,
        payload: Any,
        data: Optional[Mapping[str, Any]],
    ) -> Any:
        headers = {
            "cache-control": "no-cache",
            "authorization": _bearer(token),
        }
        # Multipart uploads let the transport set content-type with its boundary
        if kind is not RequestKind.FILE_POST:
            headers["content-type"] = "application/json"

        target = self.api_url + url
        try:
            if kind is RequestKind.JSON_POST:
                response = await self.client.post(target, json=payload, headers=headers)
            elif kind is RequestKind.FILE_POST:
                response = await self.client.post(
                    target, files=payload, data=data, headers=headers
                )
            else:
                response = await self.client.get(target, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = f"Http failure response for {target}: {status} {e.response.reason_phrase}"
            logger.warning("Request to %s failed with HTTP %d", url, status)
            raise TransportError(
                f"Error Code: {status}\nMessage: {detail}",
                status_code=status,
                context={"url": url},
            ) from e
        except httpx.RequestError as e:
            logger.warning("Request to %s failed: %s", url, str(e) or type(e).__name__)
            raise TransportError(
                f"Error: {str(e) or type(e).__name__}",
                context={"url": url},
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _force_logout(self, url: str) -> None:
        logger.warning("Session expired during request to %s; signing out", url)
        self.storage.clear()
        self.alert("error", SESSION_EXPIRED_MESSAGE)
        self.redirect_to(SIGNIN_PATH)
        raise SessionExpiredError(SESSION_EXPIRED_MESSAGE, context={"url": url})
