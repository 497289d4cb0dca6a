"""Xiaomi Mi gamepad support."""

from __future__ import annotations

from enum import IntEnum

from .controller_state import (
    BATTERY_MAX,
    EmulatedController,
    invert_analog_stick_value,
    pack_analog_stick,
)

TRIGGER_MAX = 0xFF
INIT_PACKET = bytes([0x20, 0x00, 0x00])

_REPORT_SIZE = 21


class XiaomiDPad(IntEnum):
    N = 0
    NE = 1
    E = 2
    SE = 3
    S = 4
    SW = 5
    W = 6
    NW = 7
    RELEASED = 0x0F


_DOWN = frozenset({XiaomiDPad.S, XiaomiDPad.SE, XiaomiDPad.SW})
_UP = frozenset({XiaomiDPad.N, XiaomiDPad.NE, XiaomiDPad.NW})
_RIGHT = frozenset({XiaomiDPad.E, XiaomiDPad.NE, XiaomiDPad.SE})
_LEFT = frozenset({XiaomiDPad.W, XiaomiDPad.NW, XiaomiDPad.SW})


def _bit(byte: int, position: int) -> bool:
    return bool((byte >> position) & 1)


def _battery_from_percent(level: int) -> int:
    if level <= 0:
        return 0
    return min(BATTERY_MAX, (((level - 1) // 25) + 1) << 1)


class XiaomiController(EmulatedController):
    """Xiaomi Mi Controller over Bluetooth."""

    HARDWARE_IDS = ((0x2717, 0x3144),)

    def initialize(self) -> bytes | None:
        """Send the packet that enables the controller's vibration."""
        with self._output_lock:
            return self.write_data_report(INIT_PACKET)

    def process_input_data(self, report: bytes) -> bool:
        report = bytes(report)
        if not report or report[0] != 0x04:
            return False
        self._map_input_report_0x04(report)
        return True

    def _map_input_report_0x04(self, report: bytes) -> None:
        if len(report) < _REPORT_SIZE:
            raise ValueError(f"report 0x04 truncated: {len(report)} < {_REPORT_SIZE} bytes")

        first, second, dpad = report[1], report[2], report[4]
        left_x, left_y, right_x, right_y = report[5:9]
        left_trigger, right_trigger = report[11], report[12]

        self.battery = _battery_from_percent(report[19])

        self.left_stick = pack_analog_stick(left_x, invert_analog_stick_value(left_y), 8)
        self.right_stick = pack_analog_stick(right_x, invert_analog_stick_value(right_y), 8)

        buttons = self.buttons
        buttons.dpad_down = dpad in _DOWN
        buttons.dpad_up = dpad in _UP
        buttons.dpad_right = dpad in _RIGHT
        buttons.dpad_left = dpad in _LEFT

        buttons.A = _bit(first, 1)
        buttons.B = _bit(first, 0)
        buttons.X = _bit(first, 4)
        buttons.Y = _bit(first, 3)

        buttons.R = _bit(first, 7)
        buttons.ZR = right_trigger > self.trigger_threshold * TRIGGER_MAX
        buttons.L = _bit(first, 6)
        buttons.ZL = left_trigger > self.trigger_threshold * TRIGGER_MAX

        buttons.minus = _bit(second, 2)
        buttons.plus = _bit(second, 3)

        buttons.lstick_press = _bit(second, 5)
        buttons.rstick_press = _bit(second, 6)

        buttons.home = _bit(report[20], 0)