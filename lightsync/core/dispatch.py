"""Concurrent fan-out of command frames to every ready light."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from lightsync.core.errors import LightDisconnectedError, TransportWriteError
from lightsync.core.model import AggregateResult, CommandFrame, ReadyLight, WriteOutcome

LOGGER = logging.getLogger(__name__)


class CommandDispatcher:
    def __init__(self, *, write_timeout_s: float | None = 2.0) -> None:
        self.write_timeout_s = write_timeout_s

    async def send(self, frame: CommandFrame, targets: Sequence[ReadyLight]) -> AggregateResult:
        LOGGER.debug("Sending %s to %d light(s)", frame.hex(), len(targets))
        outcomes = await asyncio.gather(*(self._write_one(frame, target) for target in targets))
        return AggregateResult(frame=frame, outcomes=tuple(outcomes))

    async def _write_one(self, frame: CommandFrame, target: ReadyLight) -> WriteOutcome:
        try:
            await self._write(frame, target)
        except TransportWriteError as exc:
            LOGGER.warning("Write to %s failed: %s", target.address, exc)
            return WriteOutcome(address=target.address, error=exc)
        return WriteOutcome(address=target.address)

    async def _write(self, frame: CommandFrame, target: ReadyLight) -> None:
        if not target.is_connected:
            raise LightDisconnectedError(target.address, "link dropped; light is no longer usable")
        try:
            await asyncio.wait_for(target.write(frame.data), timeout=self.write_timeout_s)
        except TransportWriteError:
            raise
        except asyncio.TimeoutError as exc:
            raise TransportWriteError(
                target.address, f"write timed out after {self.write_timeout_s}s"
            ) from exc
        except Exception as exc:
            raise TransportWriteError(target.address, f"write failed: {exc}") from exc
