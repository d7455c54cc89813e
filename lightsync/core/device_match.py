"""Advertisement-to-light matching logic."""

from __future__ import annotations

from collections.abc import Iterable

from lightsync.core.model import AdvertisedDevice


def matches(name: str | None, prefix: str) -> bool:
    return name is not None and name.startswith(prefix)


def filter_candidates(devices: Iterable[AdvertisedDevice], prefix: str) -> list[AdvertisedDevice]:
    seen: set[str] = set()
    candidates: list[AdvertisedDevice] = []
    for device in devices:
        if device.address in seen or not matches(device.name, prefix):
            continue
        seen.add(device.address)
        candidates.append(device)
    return candidates
