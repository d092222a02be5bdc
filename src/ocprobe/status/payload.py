# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Parsing of the ``status.php`` capability payload."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..errors import StatusPayloadError
from ..models.status import ServerStatus
from ..utils.version import ServerVersion, parse_server_version

logger = logging.getLogger(__name__)

NODE_INSTALLED = "installed"
NODE_VERSION = "version"
NODE_VERSION_STRING = "versionstring"
NODE_PRODUCT_NAME = "productname"
NODE_EDITION = "edition"
NODE_MAINTENANCE = "maintenance"
NODE_NEEDS_DB_UPGRADE = "needsDbUpgrade"


def _coerce_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise StatusPayloadError(f"{key!r} is not a boolean")


def _coerce_str(value: Any, key: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise StatusPayloadError(f"{key!r} is not a string")


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    try:
        return _coerce_bool(value, key)
    except StatusPayloadError:
        return None


def _parse_version(raw: str, version_parser: Callable[[str], ServerVersion]) -> ServerVersion:
    """Run a caller-supplied version parser; failures yield an invalid version instead of an error."""
    try:
        version = version_parser(raw)
    except Exception:  # noqa: BLE001
        logger.debug("Version parser rejected %r", raw, exc_info=True)
        return ServerVersion(raw=raw)
    if not isinstance(version, ServerVersion):
        return ServerVersion(raw=raw)
    return version


def load_status_document(body: str) -> Mapping[str, Any]:
    """Decode the body as a JSON object."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError, RecursionError) as exc:
        raise StatusPayloadError(f"Status body is not JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise StatusPayloadError("Status body is not a JSON object")
    return data


def parse_status_payload(
    body: str,
    *,
    version_parser: Callable[[str], ServerVersion] = parse_server_version,
) -> ServerStatus:
    """
    Parse a status body into a ServerStatus.

    Raises StatusPayloadError when required keys are missing or mistyped. ``installed``
    is read before ``version`` so an uninstalled instance is reported as such by the
    caller. A malformed version string is not an error.
    """
    data = load_status_document(body)
    if NODE_INSTALLED not in data:
        raise StatusPayloadError(f"Missing {NODE_INSTALLED!r}")
    installed = _coerce_bool(data[NODE_INSTALLED], NODE_INSTALLED)
    if NODE_VERSION not in data:
        raise StatusPayloadError(f"Missing {NODE_VERSION!r}")
    version = _parse_version(_coerce_str(data[NODE_VERSION], NODE_VERSION), version_parser)
    return ServerStatus(
        installed=installed,
        version=version,
        version_string=_optional_str(data, NODE_VERSION_STRING),
        product_name=_optional_str(data, NODE_PRODUCT_NAME),
        edition=_optional_str(data, NODE_EDITION),
        maintenance=_optional_bool(data, NODE_MAINTENANCE),
        needs_db_upgrade=_optional_bool(data, NODE_NEEDS_DB_UPGRADE),
    )


__all__ = ["load_status_document", "parse_status_payload"]
