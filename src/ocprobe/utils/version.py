# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server version parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_RE = re.compile(r"(\d+(?:\.\d+){0,3})(?:[-+ ]([0-9A-Za-z.+ -]*))?")
_PART_COUNT = 4


@dataclass(frozen=True, eq=False)
class ServerVersion:
    """
    Version reported by a status endpoint.

    The raw string is always kept. ``parts`` holds up to four numeric components padded
    with zeros (``10.5`` -> ``(10, 5, 0, 0)``) and is empty when the string is not a
    recognisable version. Invalid versions sort before every valid one.
    """

    raw: str
    parts: tuple[int, ...] = ()
    suffix: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.parts)

    @property
    def major(self) -> int | None:
        return self.parts[0] if self.parts else None

    def _key(self) -> tuple[bool, tuple[int, ...]]:
        return (self.is_valid, self.parts)

    def __lt__(self, other: ServerVersion) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: ServerVersion) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: ServerVersion) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: ServerVersion) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        return self._key() >= other._key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        if not (self.is_valid or other.is_valid):
            return self.raw == other.raw
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key() if self.is_valid else (False, self.raw))

    def __str__(self) -> str:
        return self.raw


def parse_server_version(raw: str | None) -> ServerVersion:
    """Parse a version string; never raises, malformed input yields an invalid version."""
    text = "" if raw is None else str(raw)
    match = _VERSION_RE.fullmatch(text.strip())
    if not match:
        return ServerVersion(raw=text)
    try:
        numbers = [int(piece) for piece in match.group(1).split(".")]
    except ValueError:
        # component too long for int conversion
        return ServerVersion(raw=text)
    numbers.extend([0] * (_PART_COUNT - len(numbers)))
    return ServerVersion(raw=text, parts=tuple(numbers), suffix=(match.group(2) or "").strip())


__all__ = ["ServerVersion", "parse_server_version"]
