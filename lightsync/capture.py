"""Screen sampling: the average color of the display."""

from __future__ import annotations

import logging

import numpy as np
from PIL import ImageGrab

from lightsync.core.errors import CaptureError

LOGGER = logging.getLogger(__name__)

Color = tuple[int, int, int]


def average_color(pixels: np.ndarray) -> Color:
    """Floor-average the red, green and blue channels of an HxWx3 or HxWx4 array."""
    if pixels.ndim != 3 or pixels.shape[2] < 3 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise CaptureError(f"Expected a non-empty HxWx3 or HxWx4 pixel array, got shape {pixels.shape}")
    count = pixels.shape[0] * pixels.shape[1]
    totals = pixels[:, :, :3].reshape(count, 3).sum(axis=0, dtype=np.uint64)
    red, green, blue = (int(total) // count for total in totals)
    return red, green, blue


class ScreenSampler:
    def __init__(
        self,
        *,
        bbox: tuple[int, int, int, int] | None = None,
        downscale: int | None = None,
    ) -> None:
        self.bbox = bbox
        self.downscale = downscale

    def sample(self) -> Color:
        try:
            image = ImageGrab.grab(bbox=self.bbox)
        except OSError as exc:
            raise CaptureError(f"Screen capture failed: {exc}") from exc

        if self.downscale:
            image = image.resize((self.downscale, self.downscale))
        color = average_color(np.asarray(image.convert("RGB")))
        LOGGER.debug("Sampled screen color %s", color)
        return color
