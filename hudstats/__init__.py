"""Linux system statistics for performance overlays: CPU, batteries, gamepads and overlay messages."""

__version__ = "0.1.0"