# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for ocprobe."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"ocprobe/{__version__}"
DEFAULT_STATUS_PATH = "/status.php"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ProbeSettings:
    """Status probe defaults."""

    connect_timeout: float = 5.0
    read_timeout: float = 5.0
    max_redirects: int = 10
    status_path: str = DEFAULT_STATUS_PATH
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    fallback_on_ssl_error: bool = True
    max_body_bytes: int = 1024 * 1024

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_redirects = _int_env("OCPROBE_MAX_REDIRECTS", cls.max_redirects)
        if max_redirects < 0:
            max_redirects = cls.max_redirects
        max_body_bytes = _int_env("OCPROBE_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        status_path = os.getenv("OCPROBE_STATUS_PATH", cls.status_path) or cls.status_path
        if not status_path.startswith("/"):
            status_path = f"/{status_path}"
        return cls(
            connect_timeout=_float_env("OCPROBE_CONNECT_TIMEOUT", cls.connect_timeout),
            read_timeout=_float_env("OCPROBE_READ_TIMEOUT", cls.read_timeout),
            max_redirects=max_redirects,
            status_path=status_path,
            user_agent=os.getenv("OCPROBE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("OCPROBE_VERIFY_SSL", cls.verify_ssl),
            fallback_on_ssl_error=_bool_env("OCPROBE_SSL_FALLBACK", cls.fallback_on_ssl_error),
            max_body_bytes=max_body_bytes,
        )


def load_probe_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
