"""Gimbal commands."""

from __future__ import annotations

from typing import BinaryIO

from .protocol import Package, SequenceTracker

_RECENTER_DATA = bytes([0x00, 0x08, 0x05, 0x64, 0x00, 0x00, 0x00, 0x64, 0x00])


class Gimbal:
    """Sends movement commands to the gimbal."""

    def __init__(self, stream: BinaryIO, tracker: SequenceTracker | None = None) -> None:
        self._stream = stream
        self._tracker = tracker

    def _send(self, pkg: Package) -> None:
        pkg.write_to(self._stream, self._tracker)
        self._stream.flush()

    def send_workmode(self, mode: int) -> None:
        """Select the gimbal work mode."""
        # The mode byte is followed by a 32-bit zero.
        self._send(Package(0x09, 0x04, 0x04, 0x4C).pack("Bi", mode, 0))

    def recenter(self) -> None:
        """Move the gimbal back to its centre position."""
        self._send(Package(0xC9, 0x04, 0x3F, 0xB2, data=bytearray(_RECENTER_DATA)))

    def send_angles(self, yaw: int, pitch: int) -> None:
        """Move the gimbal to the given yaw and pitch."""
        data = bytes(
            [
                0x00, 0x08, 0x1D,
                yaw & 0xFF, (yaw >> 8) & 0xFF,
                0x00, 0x00,
                pitch & 0xFF, (pitch >> 8) & 0xFF,
                0x00, 0x00, 0x1E, 0x00, 0x00, 0x00, 0x1E, 0x00,
            ]
        )
        self._send(Package(0xC9, 0x04, 0x3F, 0xB0, data=bytearray(data)))