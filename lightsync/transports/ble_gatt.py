"""BLE GATT transport implementation backed by bleak."""

from __future__ import annotations

import asyncio
import logging

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from lightsync.core.errors import (
    ConnectError,
    LightDisconnectedError,
    ScanError,
    ServiceDiscoveryError,
    TransportWriteError,
)
from lightsync.core.model import AdvertisedDevice, CharacteristicId, normalize_uuid

LOGGER = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (BleakError, asyncio.TimeoutError, OSError)


class BleakPeripheral:
    def __init__(self, device: AdvertisedDevice, *, timeout_s: float = 10.0) -> None:
        self.address = device.address
        self._client = BleakClient(
            device.handle if device.handle is not None else device.address,
            disconnected_callback=self._on_disconnect,
            timeout=timeout_s,
        )
        self._characteristics: dict[CharacteristicId, BleakGATTCharacteristic] = {}

    @property
    def is_connected(self) -> bool:
        return self._client.is_connected

    def _on_disconnect(self, _: BleakClient) -> None:
        LOGGER.warning("Light %s disconnected", self.address)

    async def connect(self) -> None:
        try:
            await self._client.connect()
        except _TRANSPORT_ERRORS as exc:
            raise ConnectError(self.address, f"BLE connect failed: {exc}") from exc
        if not self._client.is_connected:
            raise ConnectError(self.address, "BLE connect returned without a connection")

    async def discover_characteristics(self) -> list[CharacteristicId]:
        try:
            services = self._client.services
        except BleakError as exc:
            raise ServiceDiscoveryError(self.address, f"Service discovery failed: {exc}") from exc

        self._characteristics.clear()
        for service in services:
            for char in service.characteristics:
                char_id = CharacteristicId(
                    service_uuid=normalize_uuid(service.uuid),
                    uuid=normalize_uuid(char.uuid),
                )
                self._characteristics[char_id] = char
        return list(self._characteristics)

    async def write(self, characteristic: CharacteristicId, data: bytes) -> None:
        if not self._client.is_connected:
            raise LightDisconnectedError(self.address, "link is not connected")
        target = self._characteristics.get(characteristic)
        if target is None:
            raise TransportWriteError(
                self.address, f"characteristic {characteristic.uuid} was not discovered"
            )
        try:
            await self._client.write_gatt_char(target, data, response=False)
        except _TRANSPORT_ERRORS as exc:
            raise TransportWriteError(self.address, f"BLE write failed: {exc}") from exc

    async def disconnect(self) -> None:
        if self._client.is_connected:
            await self._client.disconnect()


class BleakTransport:
    def __init__(self, *, connect_timeout_s: float = 10.0) -> None:
        self.connect_timeout_s = connect_timeout_s

    async def scan(self, timeout_s: float) -> list[AdvertisedDevice]:
        seen: dict[str, AdvertisedDevice] = {}

        def _detection_callback(device: BLEDevice, adv: AdvertisementData) -> None:
            # Later advertisements refresh the entry but keep first-seen order.
            seen[device.address] = AdvertisedDevice(
                address=device.address,
                name=adv.local_name or device.name,
                rssi=adv.rssi,
                handle=device,
            )

        scanner = BleakScanner(detection_callback=_detection_callback)
        try:
            await scanner.start()
            try:
                await asyncio.sleep(timeout_s)
            finally:
                await scanner.stop()
        except _TRANSPORT_ERRORS as exc:
            raise ScanError(f"BLE scan failed: {exc}") from exc

        LOGGER.debug("Scan finished with %d advertising device(s)", len(seen))
        return list(seen.values())

    def open(self, device: AdvertisedDevice) -> BleakPeripheral:
        return BleakPeripheral(device, timeout_s=self.connect_timeout_s)
