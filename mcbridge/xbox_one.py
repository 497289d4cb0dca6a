"""Xbox One wireless controller support."""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import Any

from .controller_state import (
    BATTERY_MAX,
    EmulatedController,
    invert_analog_stick_value,
    pack_analog_stick,
)

TRIGGER_MAX = 0x3FF

_OLD_REPORT_SIZE = 16
_NEW_REPORT_SIZE = 17


class XboxOneDPad(IntEnum):
    RELEASED = 0
    N = 1
    NE = 2
    E = 3
    SE = 4
    S = 5
    SW = 6
    W = 7
    NW = 8


class XboxOnePowerMode(IntEnum):
    USB = 0
    BATTERY = 1
    PLAY_N_CHARGE = 2


_DOWN = frozenset({XboxOneDPad.S, XboxOneDPad.SE, XboxOneDPad.SW})
_UP = frozenset({XboxOneDPad.N, XboxOneDPad.NE, XboxOneDPad.NW})
_RIGHT = frozenset({XboxOneDPad.E, XboxOneDPad.NE, XboxOneDPad.SE})
_LEFT = frozenset({XboxOneDPad.W, XboxOneDPad.NW, XboxOneDPad.SW})


def _bit(byte: int, position: int) -> bool:
    return bool((byte >> position) & 1)


def _require(report: bytes, size: int) -> None:
    if len(report) < size:
        raise ValueError(f"report {report[0]:#04x} truncated: {len(report)} < {size} bytes")


class XboxOneController(EmulatedController):
    """Xbox One S, Elite 2 and Adaptive controllers over Bluetooth."""

    HARDWARE_IDS = (
        (0x045E, 0x02E0),
        (0x045E, 0x02FD),
        (0x045E, 0x0B00),
        (0x045E, 0x0B05),
        (0x045E, 0x0B0A),
    )

    def set_vibration(self, motor_data: Any) -> bytes | None:
        """Drive the strong and weak motors from Switch motor amplitudes.

        ``motor_data`` has ``left_motor`` and ``right_motor``, each with
        ``low_band_amp`` and ``high_band_amp``.
        """
        strong = int(100 * max(motor_data.left_motor.low_band_amp,
                               motor_data.right_motor.low_band_amp)) & 0xFF
        weak = int(100 * max(motor_data.left_motor.high_band_amp,
                             motor_data.right_motor.high_band_amp)) & 0xFF
        report = bytes([0x03, 0x03, 0x00, 0x00, strong, weak, 1, 0, 0])
        return self.write_data_report(report)

    def process_input_data(self, report: bytes) -> bool:
        report = bytes(report)
        if not report:
            return False
        report_id = report[0]
        if report_id == 0x01:
            self._map_input_report_0x01(report, len(report) >= _NEW_REPORT_SIZE)
        elif report_id == 0x02:
            self._map_input_report_0x02(report)
        elif report_id == 0x04:
            self._map_input_report_0x04(report)
        else:
            return False
        return True

    def _map_input_report_0x01(self, report: bytes, new_format: bool) -> None:
        _require(report, _OLD_REPORT_SIZE)
        lx, ly, rx, ry, left_trigger, right_trigger = struct.unpack_from("<6H", report, 1)
        self.left_stick = pack_analog_stick(lx, invert_analog_stick_value(ly), 16)
        self.right_stick = pack_analog_stick(rx, invert_analog_stick_value(ry), 16)

        buttons = self.buttons
        buttons.ZR = right_trigger > self.trigger_threshold * TRIGGER_MAX
        buttons.ZL = left_trigger > self.trigger_threshold * TRIGGER_MAX

        dpad = report[13]
        buttons.dpad_down = dpad in _DOWN
        buttons.dpad_up = dpad in _UP
        buttons.dpad_right = dpad in _RIGHT
        buttons.dpad_left = dpad in _LEFT

        first, second = report[14], report[15]
        if new_format:
            buttons.A = _bit(first, 1)
            buttons.B = _bit(first, 0)
            buttons.X = _bit(first, 4)
            buttons.Y = _bit(first, 3)
            buttons.R = _bit(first, 7)
            buttons.L = _bit(first, 6)
            buttons.minus = _bit(report[16], 0)
            buttons.plus = _bit(second, 3)
            buttons.lstick_press = _bit(second, 5)
            buttons.rstick_press = _bit(second, 6)
            buttons.home = _bit(second, 4)
        else:
            buttons.A = _bit(first, 1)
            buttons.B = _bit(first, 0)
            buttons.X = _bit(first, 3)
            buttons.Y = _bit(first, 2)
            buttons.R = _bit(first, 5)
            buttons.L = _bit(first, 4)
            buttons.minus = _bit(first, 6)
            buttons.plus = _bit(first, 7)
            buttons.lstick_press = _bit(second, 0)
            buttons.rstick_press = _bit(second, 1)

    def _map_input_report_0x02(self, report: bytes) -> None:
        _require(report, 2)
        self.buttons.home = _bit(report[1], 0)

    def _map_input_report_0x04(self, report: bytes) -> None:
        _require(report, 2)
        status = report[1]
        capacity = status & 0x3
        mode = (status >> 2) & 0x3
        self.ext_power = mode != XboxOnePowerMode.BATTERY
        self.battery = BATTERY_MAX if mode == XboxOnePowerMode.USB else capacity << 1
        self.charging = _bit(status, 4)