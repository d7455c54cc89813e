"""Encoding of logical light commands into fixed-length wire frames.

Every frame is 20 bytes: the command bytes zero-padded to 19 bytes,
followed by a trailer byte holding the XOR of the 19 preceding bytes. The
light firmware drops frames whose trailer does not match.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import reduce
from operator import xor

from lightsync.core.model import FRAME_LENGTH, CommandFrame

_BODY_LENGTH = FRAME_LENGTH - 1

COMMAND_PREFIX = 0x33
OP_POWER = 0x01
OP_BRIGHTNESS = 0x04
OP_COLOR = 0x05
COLOR_MODE_MANUAL = 0x02


def _checksum(body: bytes) -> int:
    return reduce(xor, body, 0)


def encode(command: bytes | Sequence[int]) -> CommandFrame:
    body = bytes(command)
    if len(body) > _BODY_LENGTH:
        raise ValueError(f"Command exceeds {_BODY_LENGTH} bytes: {body.hex()}")
    body = body.ljust(_BODY_LENGTH, b"\x00")
    return CommandFrame(body + bytes([_checksum(body)]))


def power_frame(on: bool) -> CommandFrame:
    return encode([COMMAND_PREFIX, OP_POWER, int(on)])


def brightness_frame(level: int) -> CommandFrame:
    return encode([COMMAND_PREFIX, OP_BRIGHTNESS, level])


def color_frame(red: int, green: int, blue: int) -> CommandFrame:
    return encode([COMMAND_PREFIX, OP_COLOR, COLOR_MODE_MANUAL, red, green, blue])


def verify_frame(data: bytes) -> bool:
    """Return True if `data` is a complete frame with a valid trailer."""
    if len(data) != FRAME_LENGTH:
        return False
    return _checksum(data[:_BODY_LENGTH]) == data[_BODY_LENGTH]
