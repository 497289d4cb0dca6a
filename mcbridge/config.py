"""Module configuration read from an INI file."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from os import PathLike

from .address import BluetoothAddress, parse_address

HOST_NAME_SIZE = 0x20
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_WHITESPACE = " \t\n\v\f\r"
_INT_PREFIX = re.compile(r"[+-]?[0-9]*")
_INLINE_COMMENT = re.compile(r"\s;")
_KEY_VALUE_SEPARATOR = re.compile(r"[=:]")

_GENERAL_BOOLEANS = ("enable_rumble", "enable_motion")
_MISC_BOOLEANS = ("dualsense_enable_player_leds",)
_MISC_INTEGERS = {
    "analog_trigger_activation_threshold": (0, 100),
    "dualshock3_led_mode": (0, 2),
    "dualshock4_polling_rate": (0, 16),
    "dualshock4_lightbar_brightness": (0, 9),
    "dualsense_lightbar_brightness": (0, 9),
    "dualsense_vibration_intensity": (1, 8),
}


@dataclass
class GeneralConfig:
    enable_rumble: bool = True
    enable_motion: bool = True


@dataclass
class BluetoothConfig:
    host_name: str = ""
    host_address: BluetoothAddress = field(default_factory=BluetoothAddress)


@dataclass
class MiscConfig:
    analog_trigger_activation_threshold: int = 50
    dualshock3_led_mode: int = 0
    dualshock4_polling_rate: int = 8
    dualshock4_lightbar_brightness: int = 5
    dualsense_lightbar_brightness: int = 5
    dualsense_enable_player_leds: bool = True
    dualsense_vibration_intensity: int = 4


def parse_boolean(value: str, current: bool) -> bool:
    """Return the boolean spelled by ``value``, or ``current`` if it spells neither."""
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return current


def parse_int(value: str, current: int, minimum: int = INT_MIN, maximum: int = INT_MAX) -> int:
    """Read a leading decimal integer; keep ``current`` when it is out of range.

    Text without leading digits reads as zero.
    """
    match = _INT_PREFIX.match(value.lstrip(_WHITESPACE))
    digits = match.group(0) if match else ""
    number = int(digits) if digits.lstrip("+-") else 0
    return number if minimum <= number <= maximum else current


def _truncate_host_name(value: str) -> str:
    return value.encode("utf-8")[:HOST_NAME_SIZE].decode("utf-8", errors="ignore")


@dataclass
class MissionControlConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    bluetooth: BluetoothConfig = field(default_factory=BluetoothConfig)
    misc: MiscConfig = field(default_factory=MiscConfig)

    def apply(self, section: str, name: str, value: str) -> bool:
        """Apply one INI entry. Returns False when the section is unknown.

        Unknown names in a known section and unparsable values are ignored.
        """
        section_key = section.lower()
        key = name.lower()

        if section_key == "general":
            if key in _GENERAL_BOOLEANS:
                setattr(self.general, key, parse_boolean(value, getattr(self.general, key)))
        elif section_key == "bluetooth":
            if key == "host_name":
                self.bluetooth.host_name = _truncate_host_name(value)
            elif key == "host_address":
                try:
                    self.bluetooth.host_address = parse_address(value)
                except ValueError:
                    pass
        elif section_key == "misc":
            if key in _MISC_BOOLEANS:
                setattr(self.misc, key, parse_boolean(value, getattr(self.misc, key)))
            elif key in _MISC_INTEGERS:
                minimum, maximum = _MISC_INTEGERS[key]
                setattr(self.misc, key, parse_int(value, getattr(self.misc, key), minimum, maximum))
        else:
            return False
        return True


def _strip_inline_comment(line: str) -> str:
    match = _INLINE_COMMENT.search(line)
    return line[:match.start()] if match else line


def _iter_entries(text: str) -> Iterator[tuple[str, str, str]]:
    """Yield (section, name, value) for every key line of INI text."""
    section = ""
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.removeprefix("\ufeff") if number == 1 else raw
        line = line.strip()
        if not line or line[0] in ";#":
            continue
        line = _strip_inline_comment(line).rstrip()
        if line.startswith("["):
            end = line.find("]")
            if end != -1:
                section = line[1:end]
            continue
        parts = _KEY_VALUE_SEPARATOR.split(line, maxsplit=1)
        if len(parts) != 2:
            continue
        name, value = parts
        yield section, name.rstrip(), value.lstrip()


def parse_config(text: str) -> MissionControlConfig:
    """Build a configuration from INI text, starting from the defaults."""
    config = MissionControlConfig()
    for section, name, value in _iter_entries(text):
        config.apply(section, name, value)
    return config


def load_config(path: str | PathLike[str]) -> MissionControlConfig:
    """Load the configuration file; a file that cannot be read yields the defaults."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return MissionControlConfig()
    return parse_config(text)