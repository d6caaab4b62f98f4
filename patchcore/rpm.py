"""RPM package NEVRA parsing and version comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import zip_longest

_NEVRA_RE = re.compile(
    r"((?P<e1>[0-9]+):)?(?P<pn>[^:]+)-((?P<e2>[0-9]+):)?(?P<ver>[^-:]+)-(?P<rel>[^-:]+)\.(?P<arch>[a-z0-9_]+)"
)
_SEGMENT_RE = re.compile(r"[0-9]+|[A-Za-z]+|~|\^")


class NevraError(ValueError):
    """Raised when a string is not a valid NEVRA."""


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def vercmp(a: str, b: str) -> int:
    """Compare two version strings the way rpm does; returns -1, 0 or 1."""
    if a == b:
        return 0
    for x, y in zip_longest(_SEGMENT_RE.findall(a), _SEGMENT_RE.findall(b)):
        if x == "~" or y == "~":
            if x != "~":
                return 1
            if y != "~":
                return -1
            continue
        if x == "^" or y == "^":
            if x is None:
                return -1
            if y is None:
                return 1
            if x != "^":
                return 1
            if y != "^":
                return -1
            continue
        if x is None or y is None:
            return 1 if x is not None else -1
        if x.isdigit():
            if not y.isdigit():
                return 1
            diff = _sign(int(x) - int(y))
        else:
            if y.isdigit():
                return -1
            diff = _sign((x > y) - (x < y))
        if diff:
            return diff
    return 0


@dataclass(frozen=True)
class Nevra:
    name: str
    epoch: int
    version: str
    release: str
    arch: str

    def string_e(self, show_epoch: bool = False) -> str:
        return f"{self.name}-{self.evra_string(show_epoch)}"

    def __str__(self) -> str:
        return self.string_e(False)

    def evr_string(self, show_epoch: bool = False) -> str:
        if self.epoch != 0 or show_epoch:
            return f"{self.epoch}:{self.version}-{self.release}"
        return f"{self.version}-{self.release}"

    def evra_string(self, show_epoch: bool = False) -> str:
        return f"{self.evr_string(show_epoch)}.{self.arch}"

    def cmp(self, other: "Nevra") -> int:
        """Order by name, then by epoch-version-release-arch."""
        if self.name != other.name:
            return -1 if self.name < other.name else 1
        return vercmp(self.evra_string(True), other.evra_string(True))


def parse_nevra(nevra: str) -> Nevra:
    match = _NEVRA_RE.search(nevra)
    if match is None:
        raise NevraError(f"unable to parse ({nevra})")
    epoch_text = match.group("e1") or match.group("e2") or ""
    return Nevra(
        name=match.group("pn"),
        epoch=int(epoch_text) if epoch_text else 0,
        version=match.group("ver"),
        release=match.group("rel"),
        arch=match.group("arch"),
    )


def parse_name_evra(name: str, evra: str) -> Nevra:
    return parse_nevra(f"{name}-{evra}")