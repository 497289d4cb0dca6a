"""Emulated Switch controller state shared by every supported gamepad."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Optional

BATTERY_MAX = 8
UINT12_MAX = 0xFFF

Transport = Callable[[bytes, Optional[int]], Optional[bytes]]


@dataclass
class SwitchButtons:
    """Button state of an emulated Switch Pro Controller."""

    dpad_down: bool = False
    dpad_up: bool = False
    dpad_right: bool = False
    dpad_left: bool = False
    A: bool = False
    B: bool = False
    X: bool = False
    Y: bool = False
    R: bool = False
    ZR: bool = False
    L: bool = False
    ZL: bool = False
    minus: bool = False
    plus: bool = False
    lstick_press: bool = False
    rstick_press: bool = False
    home: bool = False
    capture: bool = False


@dataclass
class SwitchAnalogStick:
    """A 12-bit analog stick position."""

    MIN: ClassVar[int] = 0
    CENTER: ClassVar[int] = 0x800
    MAX: ClassVar[int] = UINT12_MAX

    x: int = 0x800
    y: int = 0x800

    def set_data(self, x: int, y: int) -> None:
        """Set both axes; each must be a 12-bit value."""
        for axis, value in (("x", x), ("y", y)):
            if not self.MIN <= value <= self.MAX:
                raise ValueError(f"stick {axis} value out of range: {value:#x}")
        self.x = x
        self.y = y


@dataclass
class MotionVector:
    """Three-axis motion reading, from an accelerometer or a gyroscope."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


def invert_analog_stick_value(value: int) -> int:
    """Return the bitwise complement of a raw axis value.

    The width of the axis is applied when the value is packed, so that
    packing the result gives the maximum of that width minus ``value``.
    """
    return ~value


def pack_analog_stick(x: int, y: int, bits: int) -> SwitchAnalogStick:
    """Scale two raw axis values of ``bits`` bits each to a 12-bit stick."""
    if bits <= 0:
        raise ValueError(f"axis width must be positive: {bits}")
    mask = (1 << bits) - 1
    return SwitchAnalogStick(
        (x & mask) * UINT12_MAX // mask,
        (y & mask) * UINT12_MAX // mask,
    )


class EmulatedController:
    """A gamepad whose input is presented as a Switch Pro Controller.

    ``transport`` sends an output report and, when given a response id,
    returns the input report the device answers with.
    """

    HARDWARE_IDS: ClassVar[tuple[tuple[int, int], ...]] = ()

    def __init__(self, transport: Transport, trigger_threshold: float = 0.5) -> None:
        if not 0.0 <= trigger_threshold <= 1.0:
            raise ValueError(f"trigger threshold must lie in [0, 1]: {trigger_threshold}")
        self._transport = transport
        self._output_lock = threading.RLock()
        self.trigger_threshold = trigger_threshold
        self.buttons = SwitchButtons()
        self.left_stick = SwitchAnalogStick()
        self.right_stick = SwitchAnalogStick()
        self.accel = MotionVector()
        self.gyro = MotionVector()
        self.battery = BATTERY_MAX
        self.charging = False
        self.ext_power = False

    def process_input_data(self, report: bytes) -> bool:
        """Map an input report onto the emulated state; True if it was recognised.

        The generic controller recognises no report.
        """
        return False

    def write_data_report(self, data: bytes, response_id: int | None = None) -> bytes | None:
        """Send an output report, returning the reply when ``response_id`` is given."""
        with self._output_lock:
            return self._transport(bytes(data), response_id)