"""System profile documents reported by the host inventory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _without_zero(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value not in (None, "", 0, [], {})}


@dataclass
class OperatingSystem:
    major: int = 0
    minor: int = 0
    name: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "OperatingSystem":
        data = data or {}
        return cls(
            major=data.get("major") or 0,
            minor=data.get("minor") or 0,
            name=data.get("name") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_zero({"major": self.major, "minor": self.minor, "name": self.name})


@dataclass
class YumRepo:
    id: str = ""
    name: str = ""
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "YumRepo":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            enabled=bool(data.get("enabled", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_zero({"id": self.id, "name": self.name, "enabled": self.enabled})


@dataclass
class DnfModule:
    name: str = ""
    stream: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DnfModule":
        return cls(name=data.get("name") or "", stream=data.get("stream") or "")

    def to_dict(self) -> dict[str, Any]:
        return _without_zero({"name": self.name, "stream": self.stream})


@dataclass
class Rhsm:
    version: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Rhsm":
        return cls(version=(data or {}).get("version") or "")

    def to_dict(self) -> dict[str, Any]:
        return _without_zero({"version": self.version})


@dataclass
class SystemProfile:
    arch: Optional[str] = None
    host_type: str = ""
    installed_packages: Optional[list[str]] = None
    yum_repos: Optional[list[YumRepo]] = None
    dnf_modules: Optional[list[DnfModule]] = None
    operating_system: OperatingSystem = field(default_factory=OperatingSystem)
    rhsm: Rhsm = field(default_factory=Rhsm)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SystemProfile":
        packages = data.get("installed_packages")
        repos = data.get("yum_repos")
        modules = data.get("dnf_modules")
        return cls(
            arch=data.get("arch"),
            host_type=data.get("host_type") or "",
            installed_packages=None if packages is None else list(packages),
            yum_repos=None if repos is None else [YumRepo.from_dict(repo) for repo in repos],
            dnf_modules=None if modules is None else [DnfModule.from_dict(m) for m in modules],
            operating_system=OperatingSystem.from_dict(data.get("operating_system")),
            rhsm=Rhsm.from_dict(data.get("rhsm")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.arch is not None:
            result["arch"] = self.arch
        if self.host_type:
            result["host_type"] = self.host_type
        if self.installed_packages is not None:
            result["installed_packages"] = list(self.installed_packages)
        if self.yum_repos is not None:
            result["yum_repos"] = [repo.to_dict() for repo in self.yum_repos]
        if self.dnf_modules is not None:
            result["dnf_modules"] = [module.to_dict() for module in self.dnf_modules]
        # Nested documents are always written, even when all their fields are empty.
        result["operating_system"] = self.operating_system.to_dict()
        result["rhsm"] = self.rhsm.to_dict()
        return result