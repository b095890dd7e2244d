"""Semantic versions with npm-style increments.

``SemVer.bump`` follows the rules of the ``semver`` npm package's ``inc``,
which is what the project's ``package.json`` version lineage was produced
with. In particular a bump on a pre-release may only drop the pre-release
tag (``1.3.0-alpha.2`` + ``minor`` -> ``1.3.0``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from avgrel.services.release.model import BumpKind

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
_PRERELEASE_ID_RE = re.compile(r"^(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)$")

Identifier = int | str


def _parse_identifier(raw: str) -> Identifier:
    return int(raw) if raw.isdigit() else raw


def _identifier_key(ident: Identifier) -> tuple[int, int, str]:
    # numeric identifiers sort before alphanumeric ones
    if isinstance(ident, int):
        return (0, ident, "")
    return (1, 0, ident)


@total_ordering
@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[Identifier, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(str(p) for p in self.prerelease)
        if self.build:
            out += "+" + ".".join(self.build)
        return out

    def to_tag(self) -> str:
        return f"v{self}"

    def _precedence(self) -> tuple[object, ...]:
        # a version without pre-release outranks any of its pre-releases
        if not self.prerelease:
            pre: tuple[object, ...] = (1,)
        else:
            pre = (0, tuple(_identifier_key(p) for p in self.prerelease))
        return (self.major, self.minor, self.patch, pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: SemVer) -> bool:
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def bump(self, kind: BumpKind, identifier: str = "") -> SemVer:
        """Return the next version for ``kind``.

        ``identifier`` names the pre-release channel (``alpha``, ``beta``) and
        is used by the ``pre*`` kinds only.
        """
        match kind:
            case "major":
                if self.minor != 0 or self.patch != 0 or not self.prerelease:
                    return SemVer(self.major + 1, 0, 0)
                return SemVer(self.major, 0, 0)
            case "minor":
                if self.patch != 0 or not self.prerelease:
                    return SemVer(self.major, self.minor + 1, 0)
                return SemVer(self.major, self.minor, 0)
            case "patch":
                if not self.prerelease:
                    return SemVer(self.major, self.minor, self.patch + 1)
                return SemVer(self.major, self.minor, self.patch)
            case "premajor":
                return SemVer(self.major + 1, 0, 0)._next_prerelease(identifier)
            case "preminor":
                return SemVer(self.major, self.minor + 1, 0)._next_prerelease(identifier)
            case "prepatch":
                return SemVer(self.major, self.minor, self.patch + 1)._next_prerelease(identifier)
            case "prerelease":
                if not self.prerelease:
                    return SemVer(self.major, self.minor, self.patch + 1)._next_prerelease(
                        identifier
                    )
                return self._next_prerelease(identifier)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def _next_prerelease(self, identifier: str) -> SemVer:
        parts: list[Identifier] = list(self.prerelease)
        if not parts:
            parts = [0]
        else:
            for i in range(len(parts) - 1, -1, -1):
                value = parts[i]
                if isinstance(value, int):
                    parts[i] = value + 1
                    break
            else:
                parts.append(0)

        if identifier:
            same_channel = parts[0] == _parse_identifier(identifier)
            if not same_channel or len(parts) < 2 or not isinstance(parts[1], int):
                parts = [_parse_identifier(identifier), 0]

        return SemVer(self.major, self.minor, self.patch, tuple(parts))


def parse_version(value: str) -> SemVer | None:
    """Parse ``1.2.3``, ``v1.2.3``, ``1.2.3-alpha.0`` or ``1.2.3+build.5``."""
    m = _SEMVER_RE.match(value.strip())
    if m is None:
        return None
    prerelease = tuple(_parse_identifier(p) for p in m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def is_valid_identifier(value: str) -> bool:
    """True for a single pre-release identifier such as ``alpha`` or ``rc-1``.

    The empty string is accepted and means "no channel name".
    """
    return value == "" or _PRERELEASE_ID_RE.fullmatch(value) is not None
