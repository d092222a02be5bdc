# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level ocprobe facade."""

from __future__ import annotations

import threading
from contextlib import suppress

from .config import ProbeSettings, load_probe_settings
from .http.client import HttpClient, create_default_http_client
from .models import ProbeOutcome
from .status.prober import StatusProber


class OcProbe:
    """
    Convenience wrapper that owns an HTTP client and a StatusProber.

    The client is closed on ``close()`` or when leaving a ``with`` block.
    """

    def __init__(self, http_client: HttpClient | None = None, settings: ProbeSettings | None = None):
        self.settings = settings or load_probe_settings()
        self.http_client = http_client or create_default_http_client(self.settings)
        self.prober = StatusProber(self.http_client, self.settings)

    def discover(self, target: str, *, cancel_event: threading.Event | None = None) -> ProbeOutcome:
        return self.prober.discover(target, cancel_event=cancel_event)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> OcProbe:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()
