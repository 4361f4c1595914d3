"""Chassis telemetry topics and drive commands."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, ClassVar

from .protocol import Package, SequenceTracker


def _neg16(value: int) -> int:
    """Negate a 16-bit signed value with two's-complement wrap-around."""
    struct.pack("<h", value)
    return ((-value + 0x8000) & 0xFFFF) - 0x8000


@dataclass(frozen=True)
class Attitude:
    """Chassis orientation in degrees."""

    UID: ClassVar[bytes] = bytes([0x42, 0xEE, 0x13, 0x1D, 0x03, 0x00, 0x02, 0x00])

    yaw: float
    pitch: float
    roll: float

    @classmethod
    def from_package(cls, package: Package) -> Attitude:
        return cls(*package.unpack("fff"))


@dataclass(frozen=True)
class WheelEncoders:
    """Per-wheel speed, encoder position, timer and state."""

    UID: ClassVar[bytes] = bytes([0x09, 0xA3, 0x26, 0xE2, 0x03, 0x00, 0x02, 0x00])

    rpm: tuple[int, int, int, int]
    enc: tuple[int, int, int, int]
    timer: tuple[int, int, int, int]
    state: tuple[int, int, int, int]

    @classmethod
    def from_package(cls, package: Package) -> WheelEncoders:
        return cls(
            rpm=package.unpack("4h"),
            enc=package.unpack("4H"),
            timer=package.unpack("4I"),
            state=package.unpack("4B"),
        )


@dataclass(frozen=True)
class Imu:
    """Accelerometer and gyroscope readings."""

    UID: ClassVar[bytes] = bytes([0xF4, 0x1D, 0x1C, 0xDC, 0x03, 0x00, 0x02, 0x00])

    acc_x: float
    acc_y: float
    acc_z: float
    gyr_x: float
    gyr_y: float
    gyr_z: float

    @classmethod
    def from_package(cls, package: Package) -> Imu:
        return cls(*package.unpack("6f"))


@dataclass(frozen=True)
class Battery:
    """Battery voltage reading, temperature, current and charge level."""

    UID: ClassVar[bytes] = bytes([0xFB, 0xDC, 0xF5, 0xD7, 0x03, 0x00, 0x02, 0x00])

    adc_val: int
    temperature: int
    current: int
    percent: int

    @classmethod
    def from_package(cls, package: Package) -> Battery:
        return cls(*package.unpack("HhiB"))


@dataclass(frozen=True)
class Velocity:
    """Velocity in the global frame (vg*) and the body frame (vb*)."""

    UID: ClassVar[bytes] = bytes([0x66, 0x3E, 0x3E, 0x4C, 0x03, 0x00, 0x02, 0x00])

    vgx: float
    vgy: float
    vgz: float
    vbx: float
    vby: float
    vbz: float

    @classmethod
    def from_package(cls, package: Package) -> Velocity:
        return cls(*package.unpack("6f"))


_HEARTBEAT_DATA = bytes(
    [0x00, 0x04, 0x20, 0x00, 0x01, 0x00, 0x40, 0x00, 0x02, 0x10, 0x04, 0x03, 0x00, 0x04]
)


class Chassis:
    """Sends drive commands to the chassis."""

    def __init__(self, stream: BinaryIO, tracker: SequenceTracker | None = None) -> None:
        self._stream = stream
        self._tracker = tracker

    def _send(self, pkg: Package) -> None:
        pkg.write_to(self._stream, self._tracker)
        self._stream.flush()

    def send_heartbeat(self) -> None:
        """Send the keep-alive package."""
        self._send(Package(0x09, 0x03, 0x3F, 0x60, data=bytearray(_HEARTBEAT_DATA)))

    def send_workmode(self, mode: int) -> None:
        """Select the chassis work mode (1 enables SDK control)."""
        self._send(Package(0x09, 0xC3, 0x3F, 0x19).pack("B", mode))

    def send_wheel_speed(self, w1: int, w2: int, w3: int, w4: int) -> None:
        """Set wheel speeds in rpm: front right, front left, back left, back right."""
        pkg = Package(0xC9, 0xC3, 0x3F, 0x20)
        pkg.pack("hhhh", w1, _neg16(w2), _neg16(w3), w4)
        self._send(pkg)

    def send_speed(self, vx: float, vy: float, omega: float) -> None:
        """Set the chassis velocity and turn rate."""
        self._send(Package(0xC9, 0xC3, 0x3F, 0x21).pack("fff", vx, vy, omega))