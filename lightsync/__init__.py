"""Sync BLE ambient lights with the color of the screen."""

__version__ = "0.1.0"
