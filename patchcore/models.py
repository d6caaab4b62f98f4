"""Database records of the patch service and the baseline configuration document."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Optional, Union

from .logs import log
from .timestamps import parse_rfc3339


@dataclass
class RhAccount:
    table_name: ClassVar[str] = "rh_account"
    id: int = 0
    name: Optional[str] = None
    org_id: Optional[str] = None


@dataclass
class Reporter:
    table_name: ClassVar[str] = "reporter"
    id: int = 0
    name: str = ""


@dataclass
class Baseline:
    table_name: ClassVar[str] = "baseline"
    id: int = 0
    rh_account_id: int = 0
    name: str = ""
    config: Optional[bytes] = None
    description: Optional[str] = None


@dataclass
class SystemPlatform:
    table_name: ClassVar[str] = "system_platform"
    id: int = 0
    inventory_id: str = ""
    rh_account_id: int = 0
    vmaas_json: Optional[str] = None
    json_checksum: Optional[str] = None
    last_updated: Optional[datetime] = None
    unchanged_since: Optional[datetime] = None
    last_evaluation: Optional[datetime] = None
    advisory_count_cache: int = 0
    advisory_enh_count_cache: int = 0
    advisory_bug_count_cache: int = 0
    advisory_sec_count_cache: int = 0
    last_upload: Optional[datetime] = None
    stale_timestamp: Optional[datetime] = None
    stale_warning_timestamp: Optional[datetime] = None
    culled_timestamp: Optional[datetime] = None
    stale: bool = False
    display_name: str = ""
    packages_installed: int = 0
    packages_updatable: int = 0
    third_party: bool = False
    reporter_id: Optional[int] = None
    baseline_id: Optional[int] = None
    baseline_uptodate: Optional[bool] = None
    yum_updates: Optional[bytes] = None


@dataclass
class String:
    table_name: ClassVar[str] = "strings"
    id: bytes = b""
    value: str = ""


@dataclass
class PackageName:
    table_name: ClassVar[str] = "package_name"
    id: int = 0
    name: str = ""


@dataclass
class Package:
    table_name: ClassVar[str] = "package"
    id: int = 0
    name_id: int = 0
    evra: str = ""
    description_hash: Optional[bytes] = None
    summary_hash: Optional[bytes] = None
    advisory_id: Optional[int] = None
    synced: bool = False


@dataclass
class SystemPackage:
    table_name: ClassVar[str] = "system_package"
    rh_account_id: int = 0
    system_id: int = 0
    package_id: int = 0
    # JSON of the form [{"evra": "...", "advisory": "..."}]
    update_data: Optional[bytes] = None
    name_id: int = 0


@dataclass
class PackageUpdate:
    evra: str = ""
    advisory: str = ""


@dataclass
class DeletedSystem:
    table_name: ClassVar[str] = "deleted_system"
    inventory_id: str = ""
    when_deleted: Optional[datetime] = None


@dataclass
class AdvisorySeverity:
    table_name: ClassVar[str] = "advisory_severity"
    id: int = 0
    name: str = ""


@dataclass
class AdvisoryType:
    table_name: ClassVar[str] = "advisory_type"
    id: int = 0
    name: str = ""
    preference: int = 0


@dataclass
class AdvisoryMetadata:
    table_name: ClassVar[str] = "advisory_metadata"
    id: int = 0
    name: str = ""
    description: str = ""
    synopsis: str = ""
    summary: str = ""
    solution: Optional[str] = None
    advisory_type_id: int = 0
    public_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
    url: Optional[str] = None
    severity_id: Optional[int] = None
    package_data: Optional[bytes] = None
    cve_list: Optional[bytes] = None
    reboot_required: bool = False
    release_versions: Optional[bytes] = None
    synced: bool = False


@dataclass
class SystemAdvisories:
    table_name: ClassVar[str] = "system_advisories"
    rh_account_id: int = 0
    system_id: int = 0
    advisory_id: int = 0
    advisory: AdvisoryMetadata = field(default_factory=AdvisoryMetadata)
    first_reported: Optional[datetime] = None
    when_patched: Optional[datetime] = None
    status_id: Optional[int] = None


@dataclass
class AdvisoryAccountData:
    table_name: ClassVar[str] = "advisory_account_data"
    advisory_id: int = 0
    rh_account_id: int = 0
    status_id: int = 0
    systems_affected: int = 0
    systems_status_divergent: int = 0
    notified: Optional[datetime] = None


@dataclass
class Repo:
    table_name: ClassVar[str] = "repo"
    id: int = 0
    name: str = ""
    third_party: bool = False


@dataclass
class SystemRepo:
    table_name: ClassVar[str] = "system_repo"
    rh_account_id: int = 0
    system_id: int = 0
    repo_id: int = 0


@dataclass
class TimestampKV:
    table_name: ClassVar[str] = "timestamp_kv"
    name: str = ""
    value: Optional[datetime] = None


@dataclass
class BaselineConfig:
    """Baseline settings; ``to_time`` filters advisories by latest publish time."""

    to_time: Optional[datetime] = None


def parse_baseline_config(config_bytes: Union[bytes, str, None]) -> Optional[BaselineConfig]:
    """Parse a stored baseline config; None when it is empty or cannot be parsed."""
    if not config_bytes:
        log().debug("Empty baseline config found")
        return None
    try:
        data = json.loads(config_bytes)
        if data is None:
            return BaselineConfig()
        if not isinstance(data, dict):
            raise ValueError("baseline config must be a JSON object")
        raw = data.get("to_time")
        to_time = None if raw is None else parse_rfc3339(raw)
    except (ValueError, TypeError) as exc:
        text = config_bytes.decode("utf-8", "replace") if isinstance(config_bytes, bytes) else config_bytes
        log("err", str(exc), "config", text).error("Can't parse baseline")
        return None
    return BaselineConfig(to_time=to_time)