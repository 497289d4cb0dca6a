"""Bluetooth device addresses and their text forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import takewhile

ADDRESS_LENGTH = 6

_WHITESPACE = " \t\n\v\f\r"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@dataclass(frozen=True)
class BluetoothAddress:
    """A six-byte Bluetooth device address."""

    octets: bytes = field(default=bytes(ADDRESS_LENGTH))

    def __post_init__(self) -> None:
        octets = bytes(self.octets)
        if len(octets) != ADDRESS_LENGTH:
            raise ValueError(
                f"a Bluetooth address has {ADDRESS_LENGTH} bytes, got {len(octets)}"
            )
        object.__setattr__(self, "octets", octets)

    def __bytes__(self) -> bytes:
        return self.octets

    def __str__(self) -> str:
        return ":".join(f"{octet:02x}" for octet in self.octets)

    def to_hex(self) -> str:
        """Return the address as twelve lower-case hex digits with no separators."""
        return self.octets.hex()

    def is_null(self) -> bool:
        """Return True when every byte of the address is zero."""
        return not any(self.octets)


def _parse_hex_pair(pair: str) -> int:
    """Read the leading hexadecimal number of a two-character field, as a byte."""
    text = pair.lstrip(_WHITESPACE)
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    digits = "".join(takewhile(lambda ch: ch in _HEX_DIGITS, text))
    value = int(digits, 16) if digits else 0
    if negative:
        value = -value
    return value & 0xFF


def parse_address(text: str) -> BluetoothAddress:
    """Parse an address written as six colon-separated hex pairs.

    Raises ValueError when the text has the wrong length or a separator
    is not a colon.
    """
    expected = 3 * ADDRESS_LENGTH - 1
    if len(text) != expected:
        raise ValueError(f"address text must be {expected} characters long: {text!r}")
    separators = text[2::3]
    if any(sep != ":" for sep in separators):
        raise ValueError(f"address bytes must be separated by colons: {text!r}")
    pairs = (text[start:start + 2] for start in range(0, len(text), 3))
    return BluetoothAddress(bytes(_parse_hex_pair(pair) for pair in pairs))