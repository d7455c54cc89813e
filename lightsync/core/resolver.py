"""Per-candidate connection state machine."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from lightsync.core.errors import (
    CharacteristicNotFoundError,
    ConnectError,
    ConnectionFailureError,
    ServiceDiscoveryError,
)
from lightsync.core.model import (
    COMMAND_CHARACTERISTIC_UUID,
    AdvertisedDevice,
    CharacteristicId,
    ConnectionFailure,
    ConnectionState,
    ReadyLight,
    normalize_uuid,
)
from lightsync.transports.base import LightTransport, PeripheralLink

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PendingConnection:
    device: AdvertisedDevice
    state: ConnectionState = ConnectionState.DISCOVERED
    link: PeripheralLink | None = field(default=None, repr=False)
    error: ConnectionFailureError | None = None
    failed_in: ConnectionState | None = None

    def transition(self, state: ConnectionState) -> None:
        LOGGER.debug("%s: %s -> %s", self.device.address, self.state.value, state.value)
        self.state = state

    def failure(self) -> ConnectionFailure:
        if self.error is None or self.failed_in is None:
            raise ValueError(f"{self.device.address} has not failed")
        return ConnectionFailure(device=self.device, state=self.failed_in, error=self.error)


class ConnectionResolver:
    """Drive one candidate from discovered to ready.

    Each stage either advances the pending connection or fails it with the
    stage's typed error. A failed candidate is disconnected and never
    retried here.
    """

    def __init__(self, transport: LightTransport) -> None:
        self.transport = transport

    async def resolve(self, pending: PendingConnection) -> ReadyLight:
        try:
            return await self._advance(pending)
        except ConnectionFailureError as exc:
            pending.failed_in = pending.state
            pending.error = exc
            pending.transition(ConnectionState.FAILED)
            LOGGER.warning("Light %s failed while %s: %s", pending.device.address, pending.failed_in.value, exc)
            await self._release(pending)
            raise
        except BaseException:
            # Cancelled or crashed mid-stage: the link must not outlive the task.
            await self._release(pending)
            raise

    async def _advance(self, pending: PendingConnection) -> ReadyLight:
        address = pending.device.address

        pending.transition(ConnectionState.CONNECTING)
        try:
            link = self.transport.open(pending.device)
        except Exception as exc:
            raise ConnectError(address, f"could not open link: {exc}") from exc
        pending.link = link
        await _stage(link.connect(), ConnectError, address, "connect failed")

        pending.transition(ConnectionState.SERVICES_DISCOVERING)
        characteristics = await _stage(
            link.discover_characteristics(),
            ServiceDiscoveryError,
            address,
            "service discovery failed",
        )

        pending.transition(ConnectionState.CHARACTERISTIC_RESOLVING)
        command = _find_command_characteristic(address, characteristics)
        if command is None:
            raise CharacteristicNotFoundError(
                address,
                f"command characteristic {COMMAND_CHARACTERISTIC_UUID} not found",
            )

        pending.transition(ConnectionState.READY)
        LOGGER.info("Light %s (%s) ready", address, pending.device.name)
        return ReadyLight(device=pending.device, characteristic=command, link=link)

    async def _release(self, pending: PendingConnection) -> None:
        if pending.link is None or not pending.link.is_connected:
            return
        try:
            await pending.link.disconnect()
        except Exception:
            LOGGER.debug("Disconnect after failure raised for %s", pending.device.address, exc_info=True)


async def _stage(
    operation: Awaitable[T],
    error_cls: type[ConnectionFailureError],
    address: str,
    message: str,
) -> T:
    try:
        return await operation
    except ConnectionFailureError:
        raise
    except Exception as exc:
        raise error_cls(address, f"{message}: {exc}") from exc


def _find_command_characteristic(
    address: str,
    characteristics: list[CharacteristicId],
) -> CharacteristicId | None:
    for char in characteristics:
        try:
            uuid = normalize_uuid(char.uuid)
        except (TypeError, ValueError, AttributeError) as exc:
            raise ServiceDiscoveryError(address, f"malformed characteristic UUID {char.uuid!r}") from exc
        if uuid == COMMAND_CHARACTERISTIC_UUID:
            return char
    return None
