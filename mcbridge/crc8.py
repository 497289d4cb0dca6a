"""Table-driven CRC-8 with a configurable polynomial."""

from __future__ import annotations

from collections.abc import Iterable


class Crc8:
    """CRC-8, most significant bit first, with no final xor."""

    def __init__(self, polynomial: int) -> None:
        if not 0 <= polynomial <= 0xFF:
            raise ValueError(f"polynomial must fit in a byte: {polynomial:#x}")
        self.polynomial = polynomial
        self._table = tuple(self._table_entry(value) for value in range(256))

    def _table_entry(self, value: int) -> int:
        crc = value
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ self.polynomial) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
        return crc

    def calculate(self, data: bytes | bytearray | Iterable[int], seed: int = 0x00) -> int:
        """Return the CRC of ``data``, starting from ``seed``."""
        if not 0 <= seed <= 0xFF:
            raise ValueError(f"seed must fit in a byte: {seed:#x}")
        crc = seed
        for byte in bytes(data):
            crc = self._table[crc ^ byte]
        return crc