# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe outcome models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..utils.version import ServerVersion
from .status import ServerStatus


class ProbeResultCode(str, Enum):
    OK_SSL = "OK_SSL"
    OK_NO_SSL = "OK_NO_SSL"
    OK_REDIRECT_TO_NON_SECURE_CONNECTION = "OK_REDIRECT_TO_NON_SECURE_CONNECTION"
    INSTANCE_NOT_CONFIGURED = "INSTANCE_NOT_CONFIGURED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    SSL_ERROR = "SSL_ERROR"

    @property
    def is_success(self) -> bool:
        return self in SUCCESS_CODES


SUCCESS_CODES = frozenset(
    {
        ProbeResultCode.OK_SSL,
        ProbeResultCode.OK_NO_SSL,
        ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION,
    }
)


@dataclass(frozen=True)
class RedirectHop:
    """One request of a redirect chain."""

    location: str
    status_code: int | None = None
    redirect_target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "status_code": self.status_code,
            "redirect_target": self.redirect_target,
        }


@dataclass
class ProbeOutcome:
    """
    Terminal result of a probe.

    ``version`` and ``status`` are set if and only if ``code`` is one of the success codes;
    ``__post_init__`` rejects any other combination.
    """

    code: ProbeResultCode
    location: str | None = None
    version: ServerVersion | None = None
    status: ServerStatus | None = None
    http_status: int | None = None
    error_category: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    hops: list[RedirectHop] = field(default_factory=list)
    secure_handshake_failed: bool = False
    fallback: ProbeOutcome | None = None

    def __post_init__(self) -> None:
        if self.code.is_success and self.version is None:
            raise ValueError(f"{self.code.value} outcome requires a version")
        if not self.code.is_success and (self.version is not None or self.status is not None):
            raise ValueError(f"{self.code.value} outcome cannot carry a version")

    @property
    def is_success(self) -> bool:
        return self.code.is_success

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "success": self.is_success,
            "location": self.location,
            "version": str(self.version) if self.version is not None else None,
            "status": self.status.to_dict() if self.status is not None else None,
            "http_status": self.http_status,
            "error_category": self.error_category,
            "error_message": self.error_message,
            "error_type": self.error_type,
            "hops": [hop.to_dict() for hop in self.hops],
            "secure_handshake_failed": self.secure_handshake_failed,
            "fallback": self.fallback.to_dict() if self.fallback is not None else None,
        }
