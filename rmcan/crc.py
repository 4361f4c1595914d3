"""Table-driven CRC-8 and CRC-16 checksums used by the framing protocol."""

from __future__ import annotations

from collections.abc import Iterable


def _reflected_table(poly: int) -> tuple[int, ...]:
    table = []
    for value in range(256):
        for _ in range(8):
            value = (value >> 1) ^ poly if value & 1 else value >> 1
        table.append(value)
    return tuple(table)


# Reflected Maxim/Dallas polynomial (0x31) and reflected CCITT polynomial (0x1021).
CRC8_TABLE = _reflected_table(0x8C)
CRC16_TABLE = _reflected_table(0x8408)


def crc8(data: Iterable[int], seed: int = 0) -> int:
    """Return the 8-bit checksum of ``data`` starting from ``seed``."""
    crc = seed & 0xFF
    for byte in data:
        crc = CRC8_TABLE[crc ^ byte]
    return crc


def crc16(data: Iterable[int], seed: int = 0) -> int:
    """Return the 16-bit checksum of ``data`` starting from ``seed``."""
    crc = seed & 0xFFFF
    for byte in data:
        crc = (crc >> 8) ^ CRC16_TABLE[(crc ^ byte) & 0xFF]
    return crc