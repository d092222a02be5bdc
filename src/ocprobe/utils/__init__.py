# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from .version import ServerVersion, parse_server_version

__all__ = ["ServerVersion", "parse_server_version"]
