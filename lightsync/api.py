"""Stable public API for building tooling on top of lightsync.

This module is the supported integration surface for third-party callers
(color producers, GUIs, scripts). Avoid importing from internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from lightsync.capture import ScreenSampler, average_color
from lightsync.core.ambient import ColorSource, SyncContext, run_ambient
from lightsync.core.config import LightsyncConfig, load_config
from lightsync.core.device_match import filter_candidates, matches
from lightsync.core.dispatch import CommandDispatcher
from lightsync.core.errors import (
    CaptureError,
    CharacteristicNotFoundError,
    ConfigLoadError,
    ConfigValidationError,
    ConnectError,
    ConnectionFailureError,
    DispatchError,
    InsufficientLightsError,
    LightDisconnectedError,
    LightsNotReadyError,
    LightsyncError,
    RegistrySealedError,
    ScanError,
    ServiceDiscoveryError,
    TransportError,
    TransportWriteError,
)
from lightsync.core.frame import brightness_frame, color_frame, encode, power_frame, verify_frame
from lightsync.core.manager import LightManager
from lightsync.core.model import (
    COMMAND_CHARACTERISTIC_UUID,
    FRAME_LENGTH,
    AdvertisedDevice,
    AggregateResult,
    CharacteristicId,
    CommandFrame,
    ConnectionFailure,
    ConnectionState,
    ConnectSummary,
    FailurePolicy,
    ReadyLight,
    WriteOutcome,
)
from lightsync.core.registry import LightRegistry
from lightsync.core.resolver import ConnectionResolver, PendingConnection
from lightsync.transports.base import LightTransport, PeripheralLink
from lightsync.transports.ble_gatt import BleakPeripheral, BleakTransport

__all__ = [
    "LightsyncError",
    "ConfigLoadError",
    "ConfigValidationError",
    "ScanError",
    "ConnectionFailureError",
    "ConnectError",
    "ServiceDiscoveryError",
    "CharacteristicNotFoundError",
    "InsufficientLightsError",
    "LightsNotReadyError",
    "RegistrySealedError",
    "TransportError",
    "TransportWriteError",
    "LightDisconnectedError",
    "DispatchError",
    "CaptureError",
    "COMMAND_CHARACTERISTIC_UUID",
    "FRAME_LENGTH",
    "AdvertisedDevice",
    "AggregateResult",
    "CharacteristicId",
    "CommandFrame",
    "ConnectionFailure",
    "ConnectionState",
    "ConnectSummary",
    "FailurePolicy",
    "ReadyLight",
    "WriteOutcome",
    "encode",
    "power_frame",
    "brightness_frame",
    "color_frame",
    "verify_frame",
    "matches",
    "filter_candidates",
    "ConnectionResolver",
    "PendingConnection",
    "LightRegistry",
    "CommandDispatcher",
    "LightManager",
    "LightTransport",
    "PeripheralLink",
    "BleakTransport",
    "BleakPeripheral",
    "LightsyncConfig",
    "load_config",
    "ColorSource",
    "SyncContext",
    "run_ambient",
    "ScreenSampler",
    "average_color",
]
