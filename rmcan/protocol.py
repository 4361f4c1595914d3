"""Packet framing: building, serialising and parsing protocol packages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from .crc import crc8, crc16

PKG_START_BYTE = 0x55
CRC_HEADER_INIT = 119
CRC_PACKAGE_INIT = 13970
HEADER_SIZE = 11
CHECKSUM_SIZE = 2
OVERHEAD = HEADER_SIZE + CHECKSUM_SIZE


class SequenceTracker:
    """Hands out per-command sequence numbers."""

    def __init__(self) -> None:
        self._counts: dict[int, int] = {}

    def next_id(self, cmd: int) -> int:
        """Return the sequence number to use for the command word ``cmd``.

        The first two requests for a command both yield 0; after that the
        number grows by one per request.
        """
        if cmd not in self._counts:
            self._counts[cmd] = 0
            return 0
        current = self._counts[cmd]
        self._counts[cmd] = current + 1
        return current


_DEFAULT_TRACKER = SequenceTracker()


def default_tracker() -> SequenceTracker:
    """Return the process-wide sequence tracker."""
    return _DEFAULT_TRACKER


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < n:
        chunk = stream.read(n - len(chunks))
        if not chunk:
            raise EOFError("stream ended inside a package")
        chunks.extend(chunk)
    return bytes(chunks)


@dataclass
class Package:
    """One protocol package: addressing, command and payload."""

    sender: int = 0
    receiver: int = 0
    cmd_set: int = 0
    cmd_id: int = 0
    is_ack: bool = False
    need_ack: bool = False
    data: bytearray = field(default_factory=bytearray)
    seq_id: int = 0

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)

    @property
    def cmd(self) -> int:
        return (self.cmd_set << 8) | self.cmd_id

    def pack(self, fmt: str, *args: Any) -> Package:
        """Append little-endian values described by a struct format."""
        self.data.extend(struct.pack("<" + fmt, *args))
        return self

    def unpack(self, fmt: str) -> tuple[Any, ...]:
        """Remove and return little-endian values from the front of the payload."""
        layout = struct.Struct("<" + fmt)
        if layout.size > len(self.data):
            raise ValueError(
                f"need {layout.size} bytes, payload holds {len(self.data)}"
            )
        values = layout.unpack_from(self.data)
        self.discard(layout.size)
        return values

    def discard(self, n: int) -> None:
        """Drop ``n`` bytes from the front of the payload."""
        del self.data[:n]

    def to_bytes(self, seq_id: int = 0) -> bytes:
        """Serialise the package using the given sequence number."""
        size = len(self.data) + OVERHEAD
        frame = bytearray([PKG_START_BYTE, size & 0xFF, ((size >> 8) & 0x3) | 0x4])
        frame.append(crc8(frame, CRC_HEADER_INIT))
        frame.extend(
            [
                self.sender & 0xFF,
                self.receiver & 0xFF,
                seq_id & 0xFF,
                (seq_id >> 8) & 0xFF,
                (int(self.is_ack) << 7) | (int(self.need_ack) << 5),
                self.cmd_set & 0xFF,
                self.cmd_id & 0xFF,
            ]
        )
        frame.extend(self.data)
        frame.extend(crc16(frame, CRC_PACKAGE_INIT).to_bytes(2, "little"))
        return bytes(frame)

    def write_to(self, stream: BinaryIO, tracker: SequenceTracker | None = None) -> int:
        """Write the package to ``stream``, numbering it through ``tracker``."""
        tracker = tracker if tracker is not None else default_tracker()
        seq_id = tracker.next_id(self.cmd)
        stream.write(self.to_bytes(seq_id))
        return seq_id

    @classmethod
    def read_from(cls, stream: BinaryIO) -> Package:
        """Read the next valid package, skipping noise and corrupt frames."""
        while True:
            if _read_exact(stream, 1)[0] != PKG_START_BYTE:
                continue
            length_lsb, length_msb = _read_exact(stream, 2)
            if not length_msb & 0x04:
                continue
            header_crc = _read_exact(stream, 1)[0]
            header = bytes([PKG_START_BYTE, length_lsb, length_msb])
            if header_crc != crc8(header, CRC_HEADER_INIT):
                continue
            length = length_lsb | ((length_msb & 0x03) << 8)
            if length < OVERHEAD:
                continue
            body = _read_exact(stream, length - 4 - CHECKSUM_SIZE)
            checksum = int.from_bytes(_read_exact(stream, 2), "little")
            parsed = header + bytes([header_crc]) + body
            if checksum != crc16(parsed, CRC_PACKAGE_INIT):
                continue
            flags = parsed[8]
            return cls(
                sender=parsed[4],
                receiver=parsed[5],
                cmd_set=parsed[9],
                cmd_id=parsed[10],
                is_ack=bool(flags & 0x80),
                need_ack=bool(flags & 0x20),
                data=bytearray(parsed[HEADER_SIZE:]),
                seq_id=int.from_bytes(parsed[6:8], "little"),
            )

    def __str__(self) -> str:
        text = (
            f"{self.sender:02x}>{self.receiver:02x} [{self.cmd:04x}]"
            f"{'+' if self.is_ack else ' '}{'!' if self.need_ack else ' '}"
            f" l={len(self.data):4d}"
        )
        if self.data:
            text += " d=" + "".join(f"{byte:02x} " for byte in self.data)
        return text