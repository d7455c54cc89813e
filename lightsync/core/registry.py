"""Ordered, sealable collection of ready lights."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator

from lightsync.core.errors import RegistrySealedError
from lightsync.core.model import ReadyLight

LOGGER = logging.getLogger(__name__)


class LightRegistry:
    """Owns the links of every ready light.

    Lights keep the order in which they were added. Once sealed, the set
    of lights is fixed for the rest of the run.
    """

    def __init__(self, lights: Iterable[ReadyLight] = ()) -> None:
        self._slots: list[ReadyLight] = []
        self._sealed = False
        for light in lights:
            self.add(light)

    def add(self, light: ReadyLight) -> None:
        if self._sealed:
            raise RegistrySealedError(f"Cannot add {light.address}: registry is sealed")
        self._slots.append(light)

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def all(self) -> tuple[ReadyLight, ...]:
        return tuple(self._slots)

    def disconnected(self) -> list[ReadyLight]:
        return [light for light in self._slots if not light.is_connected]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[ReadyLight]:
        return iter(self.all())

    def __getitem__(self, index: int) -> ReadyLight:
        return self._slots[index]

    async def close(self) -> None:
        results = await asyncio.gather(
            *(light.link.disconnect() for light in self._slots),
            return_exceptions=True,
        )
        for light, result in zip(self._slots, results):
            if isinstance(result, Exception):
                LOGGER.warning("Failed to disconnect %s: %s", light.address, result)
