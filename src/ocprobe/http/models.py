# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the status prober."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

Headers = dict[str, str]

REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    connect_timeout: float | None = None
    read_timeout: float | None = None
    allow_redirects: bool = False


@dataclass
class HttpResponse:
    """Normalized HTTP response: either a status/body pair or a transport failure."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_category: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def redirect_location(self) -> str | None:
        """Return the ``Location`` target of a redirect response, if any."""
        if self.status_code not in REDIRECT_STATUS_CODES:
            return None
        location = header_value(self.headers, "location")
        if location is None:
            return None
        location = location.strip()
        return location or None


def header_value(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Case-insensitive header lookup."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return value
    return None


__all__ = ["Headers", "HttpRequest", "HttpResponse", "REDIRECT_STATUS_CODES", "header_value"]
