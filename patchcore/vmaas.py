"""Request and response documents of the package update service API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _without_none(values: dict[str, Any]) -> dict[str, Any]:
    """Keep entries that are set; used for optional (nullable) fields."""
    return {key: value for key, value in values.items() if value is not None}


def _without_zero(values: dict[str, Any]) -> dict[str, Any]:
    """Keep entries that differ from their type's zero value."""
    return {key: value for key, value in values.items() if value not in (None, "", 0, [], {})}


def _optional_list(value: Optional[list]) -> Optional[list]:
    return None if value is None else list(value)


@dataclass
class UpdatesV3RequestModulesList:
    module_name: str = ""
    module_stream: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpdatesV3RequestModulesList":
        return cls(
            module_name=data.get("module_name") or "",
            module_stream=data.get("module_stream") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"module_name": self.module_name, "module_stream": self.module_stream}


def _modules_from(data: Optional[list]) -> Optional[list[UpdatesV3RequestModulesList]]:
    if data is None:
        return None
    return [UpdatesV3RequestModulesList.from_dict(item) for item in data]


def _modules_to(modules: Optional[list[UpdatesV3RequestModulesList]]) -> Optional[list]:
    if modules is None:
        return None
    return [module.to_dict() for module in modules]


@dataclass
class UpdatesV3Request:
    package_list: list[str] = field(default_factory=list)
    repository_list: Optional[list[str]] = None
    modules_list: Optional[list[UpdatesV3RequestModulesList]] = None
    releasever: Optional[str] = None
    basearch: Optional[str] = None
    security_only: Optional[bool] = None
    latest_only: Optional[bool] = None
    # Include content from "third party" repositories, disabled by default.
    third_party: Optional[bool] = None
    # Search for updates of unknown package EVRAs.
    optimistic_updates: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "package_list": list(self.package_list),
            **_without_none({
                "repository_list": _optional_list(self.repository_list),
                "modules_list": _modules_to(self.modules_list),
                "releasever": self.releasever,
                "basearch": self.basearch,
                "security_only": self.security_only,
                "latest_only": self.latest_only,
                "third_party": self.third_party,
                "optimistic_updates": self.optimistic_updates,
            }),
        }


@dataclass
class UpdatesV2ResponseAvailableUpdates:
    repository: Optional[str] = None
    releasever: Optional[str] = None
    basearch: Optional[str] = None
    erratum: Optional[str] = None
    package: Optional[str] = None

    def _key(self) -> tuple[str, str, str, str, str]:
        return (
            self.package or "",
            self.erratum or "",
            self.repository or "",
            self.basearch or "",
            self.releasever or "",
        )

    def cmp(self, other: "UpdatesV2ResponseAvailableUpdates") -> int:
        """Order by package, erratum, repository, basearch, releasever; -1, 0 or 1."""
        mine, theirs = self._key(), other._key()
        return (mine > theirs) - (mine < theirs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpdatesV2ResponseAvailableUpdates":
        return cls(
            repository=data.get("repository"),
            releasever=data.get("releasever"),
            basearch=data.get("basearch"),
            erratum=data.get("erratum"),
            package=data.get("package"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_none({
            "repository": self.repository,
            "releasever": self.releasever,
            "basearch": self.basearch,
            "erratum": self.erratum,
            "package": self.package,
        })


@dataclass
class UpdatesV2ResponseUpdateList:
    available_updates: Optional[list[UpdatesV2ResponseAvailableUpdates]] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpdatesV2ResponseUpdateList":
        updates = data.get("available_updates")
        if updates is None:
            return cls()
        return cls([UpdatesV2ResponseAvailableUpdates.from_dict(item) for item in updates])

    def to_dict(self) -> dict[str, Any]:
        if self.available_updates is None:
            return {}
        return {"available_updates": [update.to_dict() for update in self.available_updates]}


@dataclass
class UpdatesV2Response:
    update_list: Optional[dict[str, UpdatesV2ResponseUpdateList]] = None
    repository_list: Optional[list[str]] = None
    modules_list: Optional[list[UpdatesV3RequestModulesList]] = None
    releasever: Optional[str] = None
    basearch: Optional[str] = None
    last_change: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpdatesV2Response":
        raw_updates = data.get("update_list")
        update_list = None
        if raw_updates is not None:
            update_list = {
                nevra: UpdatesV2ResponseUpdateList.from_dict(item)
                for nevra, item in raw_updates.items()
            }
        return cls(
            update_list=update_list,
            repository_list=_optional_list(data.get("repository_list")),
            modules_list=_modules_from(data.get("modules_list")),
            releasever=data.get("releasever"),
            basearch=data.get("basearch"),
            last_change=data.get("last_change"),
        )

    def to_dict(self) -> dict[str, Any]:
        update_list = None
        if self.update_list is not None:
            update_list = {nevra: item.to_dict() for nevra, item in self.update_list.items()}
        return _without_none({
            "update_list": update_list,
            "repository_list": _optional_list(self.repository_list),
            "modules_list": _modules_to(self.modules_list),
            "releasever": self.releasever,
            "basearch": self.basearch,
            "last_change": self.last_change,
        })


@dataclass
class ErrataRequest:
    page: int = 0
    page_size: int = 0
    errata_list: list[str] = field(default_factory=list)
    modified_since: Optional[str] = None
    third_party: Optional[bool] = None
    type: Optional[list[str]] = None
    severity: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            **_without_zero({"page": self.page, "page_size": self.page_size}),
            "errata_list": list(self.errata_list),
            **_without_none({
                "modified_since": self.modified_since,
                "third_party": self.third_party,
                "type": _optional_list(self.type),
                "severity": _optional_list(self.severity),
            }),
        }


@dataclass
class ErrataResponseErrataList:
    updated: str = ""
    severity: str = ""
    reference_list: Optional[list[str]] = None
    issued: str = ""
    description: str = ""
    solution: Optional[str] = None
    summary: str = ""
    url: Optional[str] = None
    synopsis: str = ""
    cve_list: Optional[list[str]] = None
    bugzilla_list: Optional[list[str]] = None
    package_list: list[str] = field(default_factory=list)
    source_package_list: Optional[list[str]] = None
    type: str = ""
    third_party: Optional[bool] = None
    requires_reboot: bool = False
    release_versions: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrataResponseErrataList":
        return cls(
            updated=data.get("updated") or "",
            severity=data.get("severity") or "",
            reference_list=_optional_list(data.get("reference_list")),
            issued=data.get("issued") or "",
            description=data.get("description") or "",
            solution=data.get("solution"),
            summary=data.get("summary") or "",
            url=data.get("url"),
            synopsis=data.get("synopsis") or "",
            cve_list=_optional_list(data.get("cve_list")),
            bugzilla_list=_optional_list(data.get("bugzilla_list")),
            package_list=list(data.get("package_list") or []),
            source_package_list=_optional_list(data.get("source_package_list")),
            type=data.get("type") or "",
            third_party=data.get("third_party"),
            requires_reboot=bool(data.get("requires_reboot", False)),
            release_versions=_optional_list(data.get("release_versions")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **_without_zero({
                "updated": self.updated,
                "severity": self.severity,
                "issued": self.issued,
                "description": self.description,
                "summary": self.summary,
                "synopsis": self.synopsis,
                "package_list": list(self.package_list),
                "type": self.type,
                "requires_reboot": self.requires_reboot,
            }),
            **_without_none({
                "reference_list": _optional_list(self.reference_list),
                "solution": self.solution,
                "url": self.url,
                "cve_list": _optional_list(self.cve_list),
                "bugzilla_list": _optional_list(self.bugzilla_list),
                "source_package_list": _optional_list(self.source_package_list),
                "third_party": self.third_party,
                "release_versions": _optional_list(self.release_versions),
            }),
        }


@dataclass
class ErrataResponse:
    page: int = 0
    page_size: int = 0
    pages: int = 0
    errata_list: dict[str, ErrataResponseErrataList] = field(default_factory=dict)
    type: list[str] = field(default_factory=list)
    severity: list[str] = field(default_factory=list)
    last_change: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrataResponse":
        return cls(
            page=data.get("page") or 0,
            page_size=data.get("page_size") or 0,
            pages=data.get("pages") or 0,
            errata_list={
                name: ErrataResponseErrataList.from_dict(item)
                for name, item in (data.get("errata_list") or {}).items()
            },
            type=list(data.get("type") or []),
            severity=list(data.get("severity") or []),
            last_change=data.get("last_change") or "",
        )


@dataclass
class PkgListRequest:
    page: int = 0
    page_size: int = 0
    modified_since: Optional[str] = None
    # Include the 'modified' package attribute in the response.
    return_modified: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            **_without_zero({"page": self.page, "page_size": self.page_size}),
            **_without_none({
                "modified_since": self.modified_since,
                "return_modified": self.return_modified,
            }),
        }


@dataclass
class PkgListItem:
    nevra: str = ""
    summary: str = ""
    description: str = ""
    modified: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PkgListItem":
        return cls(
            nevra=data.get("nevra") or "",
            summary=data.get("summary") or "",
            description=data.get("description") or "",
            modified=data.get("modified") or "",
        )


@dataclass
class PkgListResponse:
    page: int = 0
    page_size: int = 0
    pages: int = 0
    last_change: Optional[str] = None
    package_list: list[PkgListItem] = field(default_factory=list)
    # Total number of packages to return.
    total: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PkgListResponse":
        return cls(
            page=data.get("page") or 0,
            page_size=data.get("page_size") or 0,
            pages=data.get("pages") or 0,
            last_change=data.get("last_change"),
            package_list=[PkgListItem.from_dict(item) for item in data.get("package_list") or []],
            total=data.get("total") or 0,
        )


@dataclass
class ReposRequest:
    page: int = 0
    page_size: int = 0
    repository_list: list[str] = field(default_factory=list)
    # Return only repositories changed after the given date.
    modified_since: Optional[str] = None
    third_party: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            **_without_zero({"page": self.page, "page_size": self.page_size}),
            "repository_list": list(self.repository_list),
            **_without_none({
                "modified_since": self.modified_since,
                "third_party": self.third_party,
            }),
        }


@dataclass
class ReposResponse:
    page: int = 0
    page_size: int = 0
    pages: int = 0
    repository_list: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    last_change: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReposResponse":
        return cls(
            page=data.get("page") or 0,
            page_size=data.get("page_size") or 0,
            pages=data.get("pages") or 0,
            repository_list={
                name: [dict(repo) for repo in repos or []]
                for name, repos in (data.get("repository_list") or {}).items()
            },
            last_change=data.get("last_change"),
        )