# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from .probe import SUCCESS_CODES, ProbeOutcome, ProbeResultCode, RedirectHop
from .status import ServerStatus

__all__ = ["ProbeOutcome", "ProbeResultCode", "RedirectHop", "SUCCESS_CODES", "ServerStatus"]
