"""Byte stream over a raw CAN socket, split into 8-byte frames."""

from __future__ import annotations

import socket
import struct
from typing import Any

CAN_EFF_MASK = 0x1FFFFFFF
CAN_MTU = 16
FRAME_PAYLOAD = 8
_FRAME = struct.Struct("=IB3x8s")
_FILTER = struct.Struct("=II")


class CanStream:
    """A binary stream bound to one CAN identifier on one interface.

    Written bytes are sent as full 8-byte frames as soon as they fill up;
    ``flush`` sends whatever is left. Reads return the payload of received
    frames.
    """

    def __init__(self, interface: str, can_id: int, *, sock: Any = None) -> None:
        self.can_id = can_id
        self._out = bytearray()
        self._in = b""
        if sock is None:
            sock = socket.socket(socket.AF_CAN, socket.SOCK_RAW, socket.CAN_RAW)
            try:
                sock.setsockopt(
                    socket.SOL_CAN_RAW,
                    socket.CAN_RAW_FILTER,
                    _FILTER.pack(can_id, CAN_EFF_MASK),
                )
                sock.bind((interface,))
            except OSError:
                sock.close()
                raise
        self._sock = sock

    def _send_frame(self, payload: bytes) -> None:
        frame = _FRAME.pack(self.can_id, len(payload), payload)
        if self._sock.send(frame) != CAN_MTU:
            raise OSError("incomplete CAN frame write")

    def write(self, data: bytes) -> int:
        """Buffer ``data``, sending every completed 8-byte frame."""
        self._out.extend(data)
        while len(self._out) >= FRAME_PAYLOAD:
            self._send_frame(bytes(self._out[:FRAME_PAYLOAD]))
            del self._out[:FRAME_PAYLOAD]
        return len(data)

    def flush(self) -> None:
        """Send any buffered bytes as a short frame."""
        if self._out:
            self._send_frame(bytes(self._out))
            self._out.clear()

    def read(self, n: int = -1) -> bytes:
        """Return up to ``n`` bytes, receiving one frame if none are buffered.

        An empty result means the socket reached end of stream.
        """
        if not self._in:
            raw = self._sock.recv(CAN_MTU)
            if len(raw) < _FRAME.size:
                return b""
            _, dlc, payload = _FRAME.unpack(raw[: _FRAME.size])
            self._in = payload[: min(dlc, FRAME_PAYLOAD)]
        if n is None or n < 0:
            n = len(self._in)
        chunk, self._in = self._in[:n], self._in[n:]
        return chunk

    def close(self) -> None:
        """Close the underlying socket."""
        self._sock.close()

    def __enter__(self) -> CanStream:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()