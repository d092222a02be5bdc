# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging

import httpx

from ..config import ProbeSettings, load_probe_settings
from ..errors import categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper; redirects are never followed automatically."""

    def __init__(self, settings: ProbeSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_probe_settings()
        self._client = client or httpx.Client(
            follow_redirects=False,
            timeout=self._timeout_for(None, None, None),
            verify=self.settings.verify_ssl,
        )

    def _timeout_for(
        self, timeout: float | None, connect_timeout: float | None, read_timeout: float | None
    ) -> httpx.Timeout:
        connect = connect_timeout if connect_timeout is not None else self.settings.connect_timeout
        read = read_timeout if read_timeout is not None else self.settings.read_timeout
        default = timeout if timeout is not None else max(connect, read)
        return httpx.Timeout(default, connect=connect, read=read)

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        max_body_bytes = self.settings.max_body_bytes

        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=self._timeout_for(request.timeout, request.connect_timeout, request.read_timeout),
                follow_redirects=request.allow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                for chunk in resp.iter_bytes():
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if remaining <= 0:
                        truncated = True
                        break
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers={key.lower(): value for key, value in resp.headers.items()},
                text=text,
                content=bytes(content),
                url=str(resp.url),
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                    "body_bytes_limit": max_body_bytes,
                },
            )
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("Request to %s failed (%s): %s", request.url, category.value, exc)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_category=category.value,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()
