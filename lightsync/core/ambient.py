"""Loop that keeps the lights on the current screen color."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from lightsync.core.manager import LightManager
from lightsync.core.model import AggregateResult, FailurePolicy

LOGGER = logging.getLogger(__name__)


class ColorSource(Protocol):
    def sample(self) -> tuple[int, int, int]:
        """Return the current (red, green, blue) color."""


@dataclass(frozen=True)
class SyncContext:
    manager: LightManager
    source: ColorSource
    interval_s: float
    policy: FailurePolicy = FailurePolicy.STRICT


async def run_ambient(
    context: SyncContext,
    *,
    max_frames: int | None = None,
    on_result: Callable[[tuple[int, int, int], AggregateResult], None] | None = None,
) -> int:
    """Send the sampled color to every light once per interval.

    Runs until cancelled or until `max_frames` colors were sent. Raises
    DispatchError as soon as a send violates the context's failure policy.
    """
    frames = 0
    while max_frames is None or frames < max_frames:
        color = await asyncio.to_thread(context.source.sample)
        result = await context.manager.set_color(*color)
        frames += 1
        if on_result is not None:
            on_result(color, result)
        result.raise_for_policy(context.policy)
        if max_frames is not None and frames >= max_frames:
            break
        await asyncio.sleep(context.interval_s)
    LOGGER.info("Ambient loop stopped after %d frame(s)", frames)
    return frames
