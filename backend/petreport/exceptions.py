"""
PetReport Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for both sides of the HTTP boundary.
How:   Each exception class carries a message, an optional context dict and
       the HTTP status it maps to. Server-side rejections are turned into
       terminal JSON responses by the filter chain or the global handlers
       registered in main.py; client-side errors propagate to gateway callers.

Exception Hierarchy:
    PetReportError (base)                  → 500
    ├── AccessDeniedError                  → 403 Forbidden (blocked user agent)
    ├── RateLimitExceededError             → 429 Too Many Requests
    ├── MalformedBodyError                 → 400 Bad Request (unparseable body)
    ├── PayloadTooLargeError               → 413 Payload Too Large (body over the parser limit)
    ├── TransportError                     (client) request never produced a body
    └── SessionExpiredError                (client) server signalled forced logout

Every server-side payload uses the same envelope as the business routes:
    {"status": false, "message": "..."}
"""

from typing import Any, Dict, Optional


class PetReportError(Exception):
    """
    Base exception for all PetReport application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def headers(self) -> Dict[str, str]:
        return {}

    def to_payload(self) -> Dict[str, Any]:
        return {"status": False, "message": self.message}


class AccessDeniedError(PetReportError):
    """
    Raised when a request carries a blocklisted user agent.

    HTTP:    403 Forbidden, body {"status": false, "message": "Access Denied"}
    """

    status_code = 403

    def __init__(
        self,
        user_agent: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if user_agent:
            ctx["user_agent"] = user_agent
        super().__init__(message="Access Denied", context=ctx)


class RateLimitExceededError(PetReportError):
    """
    Raised when a client exceeds the per-IP fixed-window request limit.

    HTTP:    429 Too Many Requests
    Headers: Retry-After, seconds until the client's window resets
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 1,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(
            message="Too many requests, please try again later.", context=ctx
        )
        self.retry_after = retry_after

    @property
    def headers(self) -> Dict[str, str]:
        return {"Retry-After": str(self.retry_after)}


class MalformedBodyError(PetReportError):
    """Raised when a JSON or form body cannot be parsed. HTTP 400."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request body",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(PetReportError):
    """Raised when a JSON or form body exceeds the parser size limit. HTTP 413."""

    status_code = 413

    def __init__(
        self,
        limit: int = 0,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["limit"] = limit
        super().__init__(message="Request body too large", context=ctx)
        self.limit = limit


class TransportError(PetReportError):
    """
    Raised by the client gateway when a call fails at the transport level.

    What:    Either the request never reached the server (network-level) or the
             server answered with an HTTP error status.
    Message: "Error: <detail>" for network failures,
             "Error Code: <status>\\nMessage: <detail>" for HTTP errors.
    """

    def __init__(
        self,
        message: str = "Unknown error!",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status_code = status_code


class SessionExpiredError(PetReportError):
    """
    Raised by the client gateway after a forced logout.

    When:    The backend flagged the response with `logoutstatus`. Session state
             has already been cleared and the user sent to the sign-in view by
             the time the caller sees this.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Your login session has expired. Please re-login.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
