"""Domain-specific errors for lightsync."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lightsync.core.model import AggregateResult, ConnectionFailure


class LightsyncError(Exception):
    """Base error for lightsync."""


class ConfigLoadError(LightsyncError):
    """Raised when the configuration file cannot be found or read."""


class ConfigValidationError(LightsyncError):
    """Raised when the configuration does not conform to schema or semantics."""


class ScanError(LightsyncError):
    """Raised when the adapter cannot run an advertisement scan."""


class ConnectionFailureError(LightsyncError):
    """Base error for a candidate light that never became ready."""

    def __init__(self, address: str, message: str) -> None:
        super().__init__(f"{address}: {message}")
        self.address = address


class ConnectError(ConnectionFailureError):
    """Raised when the transport-level connect fails."""


class ServiceDiscoveryError(ConnectionFailureError):
    """Raised when service/characteristic enumeration fails."""


class CharacteristicNotFoundError(ConnectionFailureError):
    """Raised when the light does not expose the command characteristic."""


class InsufficientLightsError(LightsyncError):
    """Raised when fewer lights than required could be made ready."""

    def __init__(
        self,
        found: int,
        required: int,
        failures: Sequence[ConnectionFailure] = (),
    ) -> None:
        message = f"Found {found} light(s) but {required} are required"
        if failures:
            details = "; ".join(str(f.error) for f in failures)
            message = f"{message}. Failures: {details}"
        super().__init__(message)
        self.found = found
        self.required = required
        self.failures = tuple(failures)


class LightsNotReadyError(LightsyncError):
    """Raised when a command is issued before lights are connected."""


class RegistrySealedError(LightsyncError):
    """Raised when adding lights to a registry after the connect phase."""


class TransportError(LightsyncError):
    """Base transport error."""


class TransportWriteError(TransportError):
    """Raised when writing a frame to one light fails."""

    def __init__(self, address: str, message: str) -> None:
        super().__init__(f"{address}: {message}")
        self.address = address


class LightDisconnectedError(TransportWriteError):
    """Raised when the link to a ready light has dropped."""


class DispatchError(LightsyncError):
    """Raised when a dispatch result violates the caller's failure policy."""

    def __init__(self, result: AggregateResult) -> None:
        failed = ", ".join(str(o.error) for o in result.failed)
        super().__init__(
            f"Command failed on {len(result.failed)} of {len(result.outcomes)} light(s): {failed}"
        )
        self.result = result


class CaptureError(LightsyncError):
    """Raised when sampling the screen fails."""
