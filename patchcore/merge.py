"""Merging of update responses from several package update queries."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .rpm import Nevra, parse_nevra
from .vmaas import (
    UpdatesV2Response,
    UpdatesV2ResponseAvailableUpdates,
    UpdatesV2ResponseUpdateList,
)


def _compare(a: UpdatesV2ResponseAvailableUpdates, b: UpdatesV2ResponseAvailableUpdates) -> int:
    order = parse_nevra(a.package or "").cmp(parse_nevra(b.package or ""))
    if order == 0:
        # Same NEVRA, compare the rest of the update.
        order = a.cmp(b)
    return order


def merge_updates(
    list_a: UpdatesV2ResponseUpdateList, list_b: UpdatesV2ResponseUpdateList
) -> UpdatesV2ResponseUpdateList:
    """Merge two sorted update lists into one sorted list without duplicates."""
    iter_a = iter(list_a.available_updates or [])
    iter_b = iter(list_b.available_updates or [])
    merged: list[UpdatesV2ResponseAvailableUpdates] = []
    current_a = next(iter_a, None)
    current_b = next(iter_b, None)
    while current_a is not None and current_b is not None:
        order = _compare(current_a, current_b)
        if order < 0:
            merged.append(current_a)
            current_a = next(iter_a, None)
        elif order > 0:
            merged.append(current_b)
            current_b = next(iter_b, None)
        else:
            merged.append(current_a)
            current_a = next(iter_a, None)
            current_b = next(iter_b, None)
    if current_a is not None:
        merged.append(current_a)
        merged.extend(iter_a)
    if current_b is not None:
        merged.append(current_b)
        merged.extend(iter_b)
    return UpdatesV2ResponseUpdateList(available_updates=merged)


def remove_non_latest_packages(response: UpdatesV2Response) -> UpdatesV2Response:
    """Keep only the update lists of the latest installed package of each name."""
    if response.update_list is None:
        return response
    latest: dict[str, tuple[str, Nevra]] = {}
    stale: set[str] = set()
    for key in response.update_list:
        nevra = parse_nevra(key)
        current = latest.get(nevra.name)
        if current is None:
            latest[nevra.name] = (key, nevra)
            continue
        order = current[1].cmp(nevra)
        if order < 0:
            stale.add(current[0])
            latest[nevra.name] = (key, nevra)
        elif order > 0:
            stale.add(key)
    kept = {key: value for key, value in response.update_list.items() if key not in stale}
    return replace(response, update_list=kept)


def merge_vmaas_responses(
    response_a: Optional[UpdatesV2Response], response_b: Optional[UpdatesV2Response]
) -> Optional[UpdatesV2Response]:
    """Merge the update data of ``response_b`` into ``response_a``.

    Update lists must be sorted; the result is sorted too. Other fields are
    taken from ``response_a``. The inputs are left unchanged.
    """
    if response_a is None:
        return response_b
    if response_b is None:
        return response_a
    merged = dict(response_a.update_list or {})
    for nevra, updates_b in (response_b.update_list or {}).items():
        if nevra in merged:
            merged[nevra] = merge_updates(merged[nevra], updates_b)
        else:
            merged[nevra] = updates_b
    return remove_non_latest_packages(replace(response_a, update_list=merged))