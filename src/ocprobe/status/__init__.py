# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from .payload import parse_status_payload
from .prober import RedirectChain, StatusProber

__all__ = ["RedirectChain", "StatusProber", "parse_status_payload"]
