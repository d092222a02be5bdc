# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Parsed capability payload of a status endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..utils.version import ServerVersion


@dataclass(frozen=True)
class ServerStatus:
    installed: bool
    version: ServerVersion
    version_string: str | None = None
    product_name: str | None = None
    edition: str | None = None
    maintenance: bool | None = None
    needs_db_upgrade: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "installed": self.installed,
            "version": str(self.version),
            "version_valid": self.version.is_valid,
            "version_string": self.version_string,
            "product_name": self.product_name,
            "edition": self.edition,
            "maintenance": self.maintenance,
            "needs_db_upgrade": self.needs_db_upgrade,
        }
