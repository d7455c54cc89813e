"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from lightsync.core.model import AdvertisedDevice, CharacteristicId


class PeripheralLink(Protocol):
    address: str

    @property
    def is_connected(self) -> bool: ...

    async def connect(self) -> None:
        """Open the transport-level connection."""

    async def discover_characteristics(self) -> list[CharacteristicId]:
        """Enumerate every characteristic of every service on the peripheral."""

    async def write(self, characteristic: CharacteristicId, data: bytes) -> None:
        """Write `data` without waiting for an application-level response."""

    async def disconnect(self) -> None:
        """Close the connection if it is open."""


class LightTransport(Protocol):
    async def scan(self, timeout_s: float) -> list[AdvertisedDevice]:
        """Collect advertisements for `timeout_s` seconds, one entry per address."""

    def open(self, device: AdvertisedDevice) -> PeripheralLink:
        """Return an unconnected link for a scanned device."""
