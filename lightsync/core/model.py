"""Core data models shared by the resolver, dispatcher, manager and CLI."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from lightsync.core.errors import DispatchError, TransportWriteError

if TYPE_CHECKING:
    from lightsync.transports.base import PeripheralLink

FRAME_LENGTH = 20
_BLUETOOTH_BASE_UUID = "-0000-1000-8000-00805f9b34fb"


def normalize_uuid(value: str) -> str:
    """Return a lowercase dashed 128-bit UUID for 16-, 32- or 128-bit input."""
    normalized = value.strip().lower()
    if len(normalized) == 4:
        normalized = f"0000{normalized}"
    if len(normalized) == 8:
        return f"{normalized}{_BLUETOOTH_BASE_UUID}"
    return str(uuid.UUID(normalized))


COMMAND_CHARACTERISTIC_UUID = normalize_uuid("000102030405060708090a0b0c0d2b11")


class ConnectionState(enum.Enum):
    DISCOVERED = "discovered"
    CONNECTING = "connecting"
    SERVICES_DISCOVERING = "services_discovering"
    CHARACTERISTIC_RESOLVING = "characteristic_resolving"
    READY = "ready"
    FAILED = "failed"


class FailurePolicy(enum.Enum):
    """How a dispatch with failed targets is judged.

    STRICT fails the call when any light failed, LENIENT only when every
    light failed.
    """

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True)
class AdvertisedDevice:
    address: str
    name: str | None
    rssi: int | None = None
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CharacteristicId:
    service_uuid: str
    uuid: str


@dataclass(frozen=True)
class ReadyLight:
    device: AdvertisedDevice
    characteristic: CharacteristicId
    link: PeripheralLink = field(compare=False, repr=False)

    @property
    def address(self) -> str:
        return self.device.address

    @property
    def name(self) -> str | None:
        return self.device.name

    @property
    def is_connected(self) -> bool:
        return self.link.is_connected

    async def write(self, data: bytes) -> None:
        await self.link.write(self.characteristic, data)


@dataclass(frozen=True)
class ConnectionFailure:
    device: AdvertisedDevice
    state: ConnectionState
    error: Exception


@dataclass(frozen=True)
class ConnectSummary:
    lights: tuple[ReadyLight, ...]
    failures: tuple[ConnectionFailure, ...]
    scanned: int
    matched: int


@dataclass(frozen=True)
class CommandFrame:
    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != FRAME_LENGTH:
            raise ValueError(f"Command frame must be {FRAME_LENGTH} bytes, got {len(self.data)}")

    def __bytes__(self) -> bytes:
        return self.data

    @property
    def checksum(self) -> int:
        return self.data[-1]

    def hex(self) -> str:
        return self.data.hex()


@dataclass(frozen=True)
class WriteOutcome:
    address: str
    error: TransportWriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregateResult:
    frame: CommandFrame
    outcomes: tuple[WriteOutcome, ...]

    @property
    def succeeded(self) -> tuple[WriteOutcome, ...]:
        return tuple(o for o in self.outcomes if o.ok)

    @property
    def failed(self) -> tuple[WriteOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and not self.succeeded

    def failed_for(self, policy: FailurePolicy) -> bool:
        if policy is FailurePolicy.STRICT:
            return not self.ok
        return self.all_failed

    def raise_for_policy(self, policy: FailurePolicy) -> None:
        if self.failed_for(policy):
            raise DispatchError(self)
