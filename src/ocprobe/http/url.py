# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers for scheme selection and redirect resolution."""

from __future__ import annotations

from urllib.parse import urlsplit

HTTP_PREFIX = "http://"
HTTPS_PREFIX = "https://"


def normalize_target(target: str) -> str:
    """Strip whitespace and trailing slashes from a caller-supplied base location."""
    return str(target or "").strip().rstrip("/")


def has_explicit_scheme(location: str) -> bool:
    """Return True when the location already starts with ``http://`` or ``https://``."""
    lowered = str(location or "").lower()
    return lowered.startswith(HTTP_PREFIX) or lowered.startswith(HTTPS_PREFIX)


def is_secure_location(location: str) -> bool:
    return str(location or "").lower().startswith(HTTPS_PREFIX)


def is_insecure_location(location: str) -> bool:
    return str(location or "").lower().startswith(HTTP_PREFIX)


def is_downgrade(current_location: str, next_location: str) -> bool:
    """
    Return True when moving from ``current_location`` to ``next_location`` leaves TLS.

    Only the secure -> insecure direction counts; an upgrade is never a downgrade.
    """
    return is_secure_location(current_location) and is_insecure_location(next_location)


def resolve_redirect_location(current_location: str, redirect_target: str) -> str:
    """
    Compute the next location of a redirect chain.

    Targets that do not start with ``/`` are taken verbatim. Path-only targets keep the
    scheme, host and port of ``current_location``; credentials are never carried over.
    """
    if not redirect_target.startswith("/"):
        return redirect_target
    parts = urlsplit(current_location)
    host_port = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host_port}{redirect_target}"


def build_status_url(location: str, status_path: str) -> str:
    """Append the status endpoint path to a base location."""
    return f"{location.rstrip('/')}{status_path}"


__all__ = [
    "HTTPS_PREFIX",
    "HTTP_PREFIX",
    "build_status_url",
    "has_explicit_scheme",
    "is_downgrade",
    "is_insecure_location",
    "is_secure_location",
    "normalize_target",
    "resolve_redirect_location",
]
