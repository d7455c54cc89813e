"""Facade tying discovery, connection and dispatch together."""

from __future__ import annotations

import asyncio
import logging

from lightsync.core.device_match import filter_candidates
from lightsync.core.dispatch import CommandDispatcher
from lightsync.core.errors import (
    ConnectionFailureError,
    InsufficientLightsError,
    LightsNotReadyError,
    RegistrySealedError,
    ScanError,
)
from lightsync.core.frame import brightness_frame, color_frame, power_frame
from lightsync.core.model import (
    AdvertisedDevice,
    AggregateResult,
    CommandFrame,
    ConnectionFailure,
    ConnectSummary,
    ReadyLight,
)
from lightsync.core.registry import LightRegistry
from lightsync.core.resolver import ConnectionResolver, PendingConnection
from lightsync.transports.base import LightTransport
from lightsync.transports.ble_gatt import BleakTransport

LOGGER = logging.getLogger(__name__)

# Extra time granted to the backend to stop scanning before the scan counts as hung.
_SCAN_GRACE_S = 5.0


class LightManager:
    def __init__(
        self,
        *,
        transport: LightTransport | None = None,
        dispatcher: CommandDispatcher | None = None,
    ) -> None:
        self.transport = transport or BleakTransport()
        self.dispatcher = dispatcher or CommandDispatcher()
        self._registry: LightRegistry | None = None

    @property
    def is_ready(self) -> bool:
        return self._registry is not None

    @property
    def lights(self) -> tuple[ReadyLight, ...]:
        if self._registry is None:
            return ()
        return self._registry.all()

    async def scan(self, timeout_ms: int) -> list[AdvertisedDevice]:
        timeout_s = timeout_ms / 1000
        try:
            return await asyncio.wait_for(
                self.transport.scan(timeout_s),
                timeout=timeout_s + _SCAN_GRACE_S,
            )
        except asyncio.TimeoutError as exc:
            raise ScanError(f"Scan did not finish within {timeout_s + _SCAN_GRACE_S:.1f}s") from exc

    async def connect(self, prefix: str, desired_count: int, timeout_ms: int) -> ConnectSummary:
        """Scan for `timeout_ms` and connect every light named `prefix*`.

        Raises InsufficientLightsError when fewer than `desired_count`
        lights match or become ready; in that case no light stays
        connected.
        """
        if self._registry is not None:
            raise RegistrySealedError("Lights are already connected; disconnect first")
        if desired_count < 1:
            raise ValueError("desired_count must be at least 1")

        LOGGER.info("Scanning %d ms for lights named '%s*'", timeout_ms, prefix)
        devices = await self.scan(timeout_ms)
        candidates = filter_candidates(devices, prefix)
        LOGGER.info("Found %d matching light(s) among %d device(s)", len(candidates), len(devices))
        if len(candidates) < desired_count:
            raise InsufficientLightsError(found=len(candidates), required=desired_count)

        registry = LightRegistry()
        resolver = ConnectionResolver(self.transport)
        pending = [PendingConnection(device=device) for device in candidates]

        async def _resolve_into_registry(candidate: PendingConnection) -> None:
            try:
                light = await resolver.resolve(candidate)
            except ConnectionFailureError:
                return
            registry.add(light)

        try:
            results = await asyncio.gather(
                *(_resolve_into_registry(p) for p in pending),
                return_exceptions=True,
            )
        except BaseException:
            # Cancelled while resolving; nothing else holds these links.
            await registry.close()
            raise
        unexpected = next((r for r in results if isinstance(r, BaseException)), None)
        if unexpected is not None:
            await registry.close()
            raise unexpected
        failures = tuple(p.failure() for p in pending if p.error is not None)

        if len(registry) < desired_count:
            await registry.close()
            raise InsufficientLightsError(
                found=len(registry),
                required=desired_count,
                failures=failures,
            )

        registry.seal()
        self._registry = registry
        LOGGER.info("Connected to %d light(s)", len(registry))
        return ConnectSummary(
            lights=registry.all(),
            failures=failures,
            scanned=len(devices),
            matched=len(candidates),
        )

    async def send(self, frame: CommandFrame) -> AggregateResult:
        if self._registry is None:
            raise LightsNotReadyError("No lights connected; call connect() first")
        return await self.dispatcher.send(frame, self._registry.all())

    async def set_power(self, on: bool) -> AggregateResult:
        return await self.send(power_frame(on))

    async def set_brightness(self, brightness: int) -> AggregateResult:
        return await self.send(brightness_frame(brightness))

    async def set_color(self, red: int, green: int, blue: int) -> AggregateResult:
        return await self.send(color_frame(red, green, blue))

    async def disconnect(self) -> None:
        registry, self._registry = self._registry, None
        if registry is not None:
            await registry.close()

    async def __aenter__(self) -> LightManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()


def describe_failure(failure: ConnectionFailure) -> str:
    name = failure.device.name or "<unnamed>"
    return f"{failure.device.address} ({name}) failed while {failure.state.value}: {failure.error}"
