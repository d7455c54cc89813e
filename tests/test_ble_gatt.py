from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from lightsync.core.errors import ConnectError, LightDisconnectedError, ScanError, TransportWriteError
from lightsync.core.model import COMMAND_CHARACTERISTIC_UUID, AdvertisedDevice, CharacteristicId
from lightsync.transports import ble_gatt
from lightsync.transports.ble_gatt import BleakPeripheral, BleakTransport

SERVICE = "0000ffd0-0000-1000-8000-00805f9b34fb"
COMMAND = SimpleNamespace(uuid=COMMAND_CHARACTERISTIC_UUID)
NOTIFY = SimpleNamespace(uuid="0000ffd4-0000-1000-8000-00805f9b34fb")


class FakeBleakClient:
    instances: list[FakeBleakClient] = []
    connect_error: Exception | None = None

    def __init__(self, address_or_device, disconnected_callback=None, timeout=10.0) -> None:
        self.target = address_or_device
        self.timeout = timeout
        self.disconnected_callback = disconnected_callback
        self.is_connected = False
        self.services = [SimpleNamespace(uuid="FFD0", characteristics=[NOTIFY, COMMAND])]
        self.writes: list[tuple[object, bytes, bool]] = []
        FakeBleakClient.instances.append(self)

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.is_connected = True

    async def write_gatt_char(self, char, data, response=True) -> None:
        self.writes.append((char, data, response))

    async def disconnect(self) -> None:
        self.is_connected = False


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> type[FakeBleakClient]:
    FakeBleakClient.instances = []
    FakeBleakClient.connect_error = None
    monkeypatch.setattr(ble_gatt, "BleakClient", FakeBleakClient)
    return FakeBleakClient


def test_peripheral_discovers_and_writes_without_response(fake_client) -> None:
    device = AdvertisedDevice(address="AA:00:00:00:00:01", name="Lamp-A", handle="ble-device")
    peripheral = BleakTransport(connect_timeout_s=3.0).open(device)

    async def _scenario():
        await peripheral.connect()
        chars = await peripheral.discover_characteristics()
        await peripheral.write(chars[1], b"\x01" * 20)
        return chars

    chars = asyncio.run(_scenario())

    client = fake_client.instances[0]
    assert client.target == "ble-device"
    assert client.timeout == 3.0
    assert chars == [
        CharacteristicId(service_uuid=SERVICE, uuid=NOTIFY.uuid),
        CharacteristicId(service_uuid=SERVICE, uuid=COMMAND_CHARACTERISTIC_UUID),
    ]
    assert client.writes == [(COMMAND, b"\x01" * 20, False)]


def test_peripheral_connect_error_is_typed(fake_client) -> None:
    fake_client.connect_error = BleakError("Device not found")
    peripheral = BleakPeripheral(AdvertisedDevice(address="AA:00:00:00:00:01", name="Lamp-A"))

    with pytest.raises(ConnectError):
        asyncio.run(peripheral.connect())


def test_peripheral_write_checks_link_and_characteristic(fake_client) -> None:
    peripheral = BleakPeripheral(AdvertisedDevice(address="AA:00:00:00:00:01", name="Lamp-A"))
    unknown = CharacteristicId(service_uuid=SERVICE, uuid=COMMAND_CHARACTERISTIC_UUID)

    with pytest.raises(LightDisconnectedError):
        asyncio.run(peripheral.write(unknown, b"\x00" * 20))

    asyncio.run(peripheral.connect())
    with pytest.raises(TransportWriteError):
        asyncio.run(peripheral.write(unknown, b"\x00" * 20))


def test_scan_collects_one_entry_per_address(monkeypatch: pytest.MonkeyPatch) -> None:
    class FakeScanner:
        def __init__(self, detection_callback) -> None:
            self.callback = detection_callback

        async def start(self) -> None:
            first = SimpleNamespace(address="AA:00:00:00:00:01", name=None)
            second = SimpleNamespace(address="AA:00:00:00:00:02", name="Lamp-B")
            self.callback(first, SimpleNamespace(local_name="Lamp-A", rssi=-60))
            self.callback(second, SimpleNamespace(local_name=None, rssi=-70))
            self.callback(first, SimpleNamespace(local_name="Lamp-A", rssi=-40))

        async def stop(self) -> None:
            pass

    monkeypatch.setattr(ble_gatt, "BleakScanner", FakeScanner)

    devices = asyncio.run(BleakTransport().scan(0))

    assert [(d.address, d.name, d.rssi) for d in devices] == [
        ("AA:00:00:00:00:01", "Lamp-A", -40),
        ("AA:00:00:00:00:02", "Lamp-B", -70),
    ]


def test_scan_adapter_failure_is_typed(monkeypatch: pytest.MonkeyPatch) -> None:
    class BrokenScanner:
        def __init__(self, detection_callback) -> None:
            pass

        async def start(self) -> None:
            raise BleakError("Bluetooth adapter not found")

        async def stop(self) -> None:
            pass

    monkeypatch.setattr(ble_gatt, "BleakScanner", BrokenScanner)

    with pytest.raises(ScanError):
        asyncio.run(BleakTransport().scan(0))
