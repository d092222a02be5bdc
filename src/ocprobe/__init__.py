# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
ocprobe package entrypoint.

This package checks whether a location serves a valid cloud-storage status endpoint
and classifies the security of the channel used to reach it. HTTP behavior is
abstracted behind an injectable client interface, and results are modeled with
typed dataclasses.
"""

from .config import ProbeSettings, load_probe_settings
from .errors import ErrorCategory, StatusPayloadError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .models import ProbeOutcome, ProbeResultCode, RedirectHop, ServerStatus
from .runtime import OcProbe
from .status import StatusProber
from .utils.version import ServerVersion, parse_server_version
from .version import __version__

__all__ = [
    "ErrorCategory",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "OcProbe",
    "ProbeOutcome",
    "ProbeResultCode",
    "ProbeSettings",
    "RedirectHop",
    "ServerStatus",
    "ServerVersion",
    "StatusPayloadError",
    "StatusProber",
    "StubHttpClient",
    "create_default_http_client",
    "load_probe_settings",
    "parse_server_version",
    "setup_logging",
    "__version__",
]
