# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Status endpoint discovery.

The prober decides which scheme to talk to a server with, walks the redirect chain of
its status endpoint one hop at a time, and validates the capability payload that
proves the endpoint runs the expected service.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from ..config import ProbeSettings, load_probe_settings
from ..errors import ErrorCategory, StatusPayloadError, categorize_exception, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..http.url import (
    HTTP_PREFIX,
    HTTPS_PREFIX,
    build_status_url,
    has_explicit_scheme,
    is_downgrade,
    is_secure_location,
    normalize_target,
    resolve_redirect_location,
)
from ..models.probe import ProbeOutcome, ProbeResultCode, RedirectHop
from ..utils.version import ServerVersion, parse_server_version
from .payload import parse_status_payload

logger = logging.getLogger(__name__)

HTTP_OK = 200


@dataclass
class RedirectChain:
    """Where a redirect walk ended and what it saw on the way."""

    location: str
    response: HttpResponse | None = None
    redirected_to_insecure: bool = False
    hops: list[RedirectHop] = field(default_factory=list)
    stopped: ErrorCategory | None = None


class StatusProber:
    """Discovers whether a base location serves a valid status endpoint, and how securely."""

    def __init__(
        self,
        http_client: HttpClient,
        settings: ProbeSettings | None = None,
        version_parser: Callable[[str], ServerVersion] | None = None,
    ):
        self.http_client = http_client
        self.settings = settings or load_probe_settings()
        self.version_parser = version_parser or parse_server_version

    def discover(self, target: str, *, cancel_event: threading.Event | None = None) -> ProbeOutcome:
        """
        Probe ``target`` and return the final classification.

        An explicit scheme is tried once. Otherwise https is tried first and http only
        when https did not succeed. A TLS handshake failure on https is kept in the
        result even when the http retry also fails.
        """
        location = normalize_target(target)
        if has_explicit_scheme(location):
            return self.attempt(location, cancel_event=cancel_event)

        secure = self.attempt(HTTPS_PREFIX + location, cancel_event=cancel_event)
        if secure.is_success or secure.error_category == ErrorCategory.CANCELLED.value:
            return secure

        handshake_failed = secure.code == ProbeResultCode.SSL_ERROR
        if handshake_failed and not self.settings.fallback_on_ssl_error:
            return secure

        logger.info("Establishing secure connection to %s failed, trying non secure connection", location)
        insecure = self.attempt(HTTP_PREFIX + location, cancel_event=cancel_event)
        if not handshake_failed:
            return insecure

        if insecure.is_success:
            insecure.secure_handshake_failed = True
            return insecure
        secure.secure_handshake_failed = True
        secure.fallback = insecure
        return secure

    def attempt(self, location: str, *, cancel_event: threading.Event | None = None) -> ProbeOutcome:
        """Probe a single fully-qualified location, following redirects."""
        chain = self.follow_redirects(location, cancel_event=cancel_event)

        if chain.stopped is not None:
            return self._failure(
                ProbeResultCode.TRANSPORT_ERROR,
                chain,
                error_category=chain.stopped.value,
                error_message=error_category_to_reason(chain.stopped),
            )

        response = chain.response
        if response is None or not response.ok:
            category = response.error_category if response is not None else ErrorCategory.UNKNOWN_ERROR.value
            code = (
                ProbeResultCode.SSL_ERROR
                if category == ErrorCategory.SSL_ERROR.value
                else ProbeResultCode.TRANSPORT_ERROR
            )
            return self._failure(
                code,
                chain,
                error_category=category,
                error_message=response.error_message if response is not None else None,
                error_type=response.error_type if response is not None else None,
            )

        if response.status_code != HTTP_OK:
            return self._failure(
                ProbeResultCode.TRANSPORT_ERROR,
                chain,
                http_status=response.status_code,
                error_category=ErrorCategory.HTTP_ERROR.value,
                error_message=f"Unexpected HTTP status {response.status_code}",
            )

        try:
            status = parse_status_payload(response.text, version_parser=self.version_parser)
        except StatusPayloadError as exc:
            logger.debug("Status payload from %s rejected: %s", chain.location, exc)
            return self._failure(
                ProbeResultCode.INSTANCE_NOT_CONFIGURED,
                chain,
                http_status=response.status_code,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )

        if not status.installed:
            return self._failure(
                ProbeResultCode.INSTANCE_NOT_CONFIGURED,
                chain,
                http_status=response.status_code,
                error_message="Server reports it is not installed",
            )

        if chain.redirected_to_insecure:
            code = ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION
        elif is_secure_location(chain.location):
            code = ProbeResultCode.OK_SSL
        else:
            code = ProbeResultCode.OK_NO_SSL

        logger.debug("Status endpoint at %s answered %s (version %s)", chain.location, code.value, status.version)
        return ProbeOutcome(
            code=code,
            location=chain.location,
            version=status.version,
            status=status,
            http_status=response.status_code,
            hops=chain.hops,
        )

    def follow_redirects(self, location: str, *, cancel_event: threading.Event | None = None) -> RedirectChain:
        """
        Request the status endpoint at ``location`` and walk its redirects one hop at a time.

        Once a hop leaves https for http the chain stays flagged as downgraded, whatever
        the later hops do.
        """
        chain = RedirectChain(location=location)
        redirects = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                chain.stopped = ErrorCategory.CANCELLED
                return chain

            response = self._request(chain.location)
            redirect_target = response.redirect_location if response.ok else None
            chain.response = response
            chain.hops.append(RedirectHop(chain.location, response.status_code, redirect_target))
            logger.debug("GET %s -> %s", chain.location, response.status_code or response.error_category)

            if not response.ok or response.status_code == HTTP_OK or redirect_target is None:
                return chain

            if redirects >= self.settings.max_redirects:
                chain.stopped = ErrorCategory.TOO_MANY_REDIRECTS
                return chain

            next_location = resolve_redirect_location(chain.location, redirect_target)
            if is_downgrade(chain.location, next_location):
                logger.info("Redirected from %s to non secure location %s", chain.location, next_location)
                chain.redirected_to_insecure = True
            chain.location = next_location
            redirects += 1

    def _request(self, location: str) -> HttpResponse:
        url = build_status_url(location, self.settings.status_path)
        request = HttpRequest(
            url=url,
            method="GET",
            connect_timeout=self.settings.connect_timeout,
            read_timeout=self.settings.read_timeout,
            allow_redirects=False,
        )
        try:
            return self.http_client.request(request)
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            return HttpResponse(
                ok=False,
                url=url,
                error_category=category.value,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )

    @staticmethod
    def _failure(
        code: ProbeResultCode,
        chain: RedirectChain,
        *,
        http_status: int | None = None,
        error_category: str | None = None,
        error_message: str | None = None,
        error_type: str | None = None,
    ) -> ProbeOutcome:
        return ProbeOutcome(
            code=code,
            location=chain.location,
            http_status=http_status,
            error_category=error_category,
            error_message=error_message,
            error_type=error_type,
            hops=chain.hops,
        )


__all__ = ["RedirectChain", "StatusProber"]
