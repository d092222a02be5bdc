# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from collections.abc import Iterator
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    CANCELLED = "CANCELLED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class StatusPayloadError(ValueError):
    """Raised when a status endpoint answers with something that is not a capability payload."""


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the low-level ``ssl.SSLError`` in a ``ConnectError``, so the whole
    cause chain is inspected before falling back to the outermost type.
    """
    chain = list(_exception_chain(exc))

    if any(isinstance(item, (ssl.SSLError, ssl.CertificateError)) for item in chain):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, httpx.TimeoutException) or any(isinstance(item, TimeoutError) for item in chain):
        return ErrorCategory.TIMEOUT

    if any(isinstance(item, (socket.gaierror, socket.herror)) for item in chain):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | str | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout while contacting the server",
        ErrorCategory.SSL_ERROR: "TLS handshake or certificate failure",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.HTTP_ERROR: "Unexpected HTTP status from the status endpoint",
        ErrorCategory.TOO_MANY_REDIRECTS: "Redirect chain exceeded the configured limit",
        ErrorCategory.CANCELLED: "Probe cancelled",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        ErrorCategory.NONE: "",
        None: "",
    }
    if isinstance(category, str) and not isinstance(category, ErrorCategory):
        try:
            category = ErrorCategory(category)
        except ValueError:
            return "Probe failed due to network error"
    return mapping.get(category, "Probe failed due to network error")


__all__ = [
    "ErrorCategory",
    "StatusPayloadError",
    "categorize_exception",
    "error_category_to_reason",
]
