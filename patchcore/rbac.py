"""Access documents returned by the role-based access control service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Access:
    permission: str = ""


@dataclass
class AccessPagination:
    data: list[Access] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessPagination":
        return cls([Access(item.get("permission") or "") for item in data.get("data") or []])

    def permissions(self) -> list[str]:
        """Permission strings in the order they were returned."""
        return [access.permission for access in self.data]