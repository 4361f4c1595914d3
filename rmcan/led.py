"""LED commands."""

from __future__ import annotations

from typing import BinaryIO

from .protocol import Package, SequenceTracker


class Led:
    """Sends colour and effect commands to the robot's LEDs."""

    def __init__(self, stream: BinaryIO, tracker: SequenceTracker | None = None) -> None:
        self._stream = stream
        self._tracker = tracker

    def send_led(
        self,
        mode: int,
        r: int,
        g: int,
        b: int,
        speed_up: int,
        speed_down: int,
        led_mask: int,
    ) -> None:
        """Set colour, effect mode and fade speeds for the LEDs in ``led_mask``."""
        pkg = Package(0x09, 0x18, 0x3F, 0x32)
        pkg.pack("BBBBBBB", mode, 0xFF, 0, r, g, b, 0)
        pkg.pack("HH", speed_up, speed_down)
        pkg.pack("BB", led_mask, 0)
        pkg.write_to(self._stream, self._tracker)
        self._stream.flush()