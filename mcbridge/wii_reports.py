"""Wii remote report layouts, extension data and identifiers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum


class WiiExtension(IntEnum):
    NONE = 0
    NUNCHUCK = 1
    CLASSIC_PRO = 2
    WIIU_PRO = 3
    MOTION_PLUS = 4
    MOTION_PLUS_NUNCHUCK_PASSTHROUGH = 5
    MOTION_PLUS_CLASSIC_PASSTHROUGH = 6
    TATACON = 7
    BALANCE_BOARD = 8
    UNRECOGNISED = 9


class MotionPlusStatus(IntEnum):
    NONE = 0
    UNINITIALISED = 1
    INACTIVE = 2
    ACTIVE = 3


class WiiOrientation(IntEnum):
    HORIZONTAL = 0
    VERTICAL = 1


PLAYER_LEDS = (0x10, 0x20, 0x40, 0x80)

_EXTENSION_IDS = {
    0xFFFFFFFF: WiiExtension.NONE,
    0xA4200000: WiiExtension.NUNCHUCK,
    0xA4200101: WiiExtension.CLASSIC_PRO,
    0xA4200120: WiiExtension.WIIU_PRO,
    0xA4200405: WiiExtension.MOTION_PLUS,
    0xA4200505: WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH,
    0xA4200705: WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH,
    0xA4200111: WiiExtension.TATACON,
    0xA4200402: WiiExtension.BALANCE_BOARD,
}


def extension_from_id(extension_id: int) -> WiiExtension:
    """Identify the extension from the 32-bit id read at 0x04a400fc."""
    return _EXTENSION_IDS.get(extension_id, WiiExtension.UNRECOGNISED)


def _bit(byte: int, position: int) -> bool:
    return bool((byte >> position) & 1)


def _bits(byte: int, position: int, width: int) -> int:
    return (byte >> position) & ((1 << width) - 1)


def _low(byte: int, position: int) -> bool:
    """Read an active-low bit: True when the bit is clear."""
    return not _bit(byte, position)


def _require(data: bytes, size: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class WiiButtons:
    """Core buttons of a Wii remote; True means pressed."""

    dpad_left: bool = False
    dpad_right: bool = False
    dpad_down: bool = False
    dpad_up: bool = False
    plus: bool = False
    two: bool = False
    one: bool = False
    B: bool = False
    A: bool = False
    minus: bool = False
    home: bool = False
    raw: bytes = field(default=bytes(2))

    @classmethod
    def from_bytes(cls, data: bytes) -> WiiButtons:
        data = _require(data, 2, "core button data")
        first, second = data[0], data[1]
        return cls(
            dpad_left=_bit(first, 0),
            dpad_right=_bit(first, 1),
            dpad_down=_bit(first, 2),
            dpad_up=_bit(first, 3),
            plus=_bit(first, 4),
            two=_bit(second, 0),
            one=_bit(second, 1),
            B=_bit(second, 2),
            A=_bit(second, 3),
            minus=_bit(second, 4),
            home=_bit(second, 7),
            raw=data[:2],
        )


@dataclass
class AccelerometerCalibration:
    """10-bit accelerometer readings at rest (0g) and at one g."""

    acc_x_0g: int = 0
    acc_y_0g: int = 0
    acc_z_0g: int = 0
    acc_x_1g: int = 0
    acc_y_1g: int = 0
    acc_z_1g: int = 0


@dataclass
class MotionPlusCalibration:
    yaw_zero: int = 0
    roll_zero: int = 0
    pitch_zero: int = 0
    yaw_scale: int = 0
    roll_scale: int = 0
    pitch_scale: int = 0
    degrees_div_6: int = 0


@dataclass
class MotionPlusCalibrationData:
    fast: MotionPlusCalibration = field(default_factory=MotionPlusCalibration)
    slow: MotionPlusCalibration = field(default_factory=MotionPlusCalibration)


@dataclass
class BalanceBoardCalibration:
    top_right_0kg: int = 0
    bottom_right_0kg: int = 0
    top_left_0kg: int = 0
    bottom_left_0kg: int = 0
    top_right_17kg: int = 0
    bottom_right_17kg: int = 0
    top_left_17kg: int = 0
    bottom_left_17kg: int = 0
    top_right_34kg: int = 0
    bottom_right_34kg: int = 0
    top_left_34kg: int = 0
    bottom_left_34kg: int = 0


@dataclass(frozen=True)
class NunchuckData:
    """Nunchuck extension bytes; C and Z are True when pressed."""

    stick_x: int
    stick_y: int
    accel_x: int
    accel_y: int
    accel_z: int
    C: bool
    Z: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> NunchuckData:
        data = _require(data, 6, "nunchuck data")
        last = data[5]
        return cls(
            stick_x=data[0],
            stick_y=data[1],
            accel_x=(data[2] << 2) | _bits(last, 2, 2),
            accel_y=(data[3] << 2) | _bits(last, 4, 2),
            accel_z=(data[4] << 2) | _bits(last, 6, 2),
            C=_low(last, 1),
            Z=_low(last, 0),
        )


@dataclass(frozen=True)
class NunchuckPassthroughData:
    """Nunchuck data interleaved through a MotionPlus; C and Z are True when pressed."""

    stick_x: int
    stick_y: int
    accel_x: int
    accel_y: int
    accel_z: int
    extension_connected: bool
    motionplus_report: bool
    C: bool
    Z: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> NunchuckPassthroughData:
        data = _require(data, 6, "nunchuck passthrough data")
        fourth, last = data[4], data[5]
        return cls(
            stick_x=data[0],
            stick_y=data[1],
            accel_x=(data[2] << 2) | (_bits(last, 4, 1) << 1),
            accel_y=(data[3] << 2) | (_bits(last, 5, 1) << 1),
            accel_z=(_bits(fourth, 1, 7) << 3) | (_bits(last, 6, 2) << 1),
            extension_connected=_bit(fourth, 0),
            motionplus_report=_bit(last, 1),
            C=_low(last, 3),
            Z=_low(last, 2),
        )


@dataclass(frozen=True)
class ClassicButtons:
    """Classic controller buttons; True means pressed."""

    R: bool = False
    plus: bool = False
    home: bool = False
    minus: bool = False
    L: bool = False
    dpad_down: bool = False
    dpad_right: bool = False
    dpad_up: bool = False
    dpad_left: bool = False
    ZR: bool = False
    X: bool = False
    A: bool = False
    Y: bool = False
    B: bool = False
    ZL: bool = False


def _classic_buttons(first: int, second: int, dpad_up: bool, dpad_left: bool) -> ClassicButtons:
    return ClassicButtons(
        R=_low(first, 1),
        plus=_low(first, 2),
        home=_low(first, 3),
        minus=_low(first, 4),
        L=_low(first, 5),
        dpad_down=_low(first, 6),
        dpad_right=_low(first, 7),
        dpad_up=dpad_up,
        dpad_left=dpad_left,
        ZR=_low(second, 2),
        X=_low(second, 3),
        A=_low(second, 4),
        Y=_low(second, 5),
        B=_low(second, 6),
        ZL=_low(second, 7),
    )


def _classic_right_stick_x(data: bytes) -> int:
    return (_bits(data[0], 6, 2) << 3) | (_bits(data[1], 6, 2) << 1) | _bits(data[2], 7, 1)


def _classic_left_trigger(data: bytes) -> int:
    return (_bits(data[2], 5, 2) << 3) | _bits(data[3], 5, 3)


@dataclass(frozen=True)
class ClassicControllerData:
    """Classic (Pro) controller: 6-bit left stick, 5-bit right stick and triggers."""

    left_stick_x: int
    left_stick_y: int
    right_stick_x: int
    right_stick_y: int
    left_trigger: int
    right_trigger: int
    buttons: ClassicButtons

    @classmethod
    def from_bytes(cls, data: bytes) -> ClassicControllerData:
        data = _require(data, 6, "classic controller data")
        return cls(
            left_stick_x=_bits(data[0], 0, 6),
            left_stick_y=_bits(data[1], 0, 6),
            right_stick_x=_classic_right_stick_x(data),
            right_stick_y=_bits(data[2], 0, 5),
            left_trigger=_classic_left_trigger(data),
            right_trigger=_bits(data[3], 0, 5),
            buttons=_classic_buttons(data[4], data[5], _low(data[5], 0), _low(data[5], 1)),
        )


@dataclass(frozen=True)
class ClassicPassthroughData:
    """Classic controller data interleaved through a MotionPlus.

    The left stick loses its lowest bit; it is reported on the 6-bit scale.
    """

    left_stick_x: int
    left_stick_y: int
    right_stick_x: int
    right_stick_y: int
    left_trigger: int
    right_trigger: int
    extension_connected: bool
    motionplus_report: bool
    buttons: ClassicButtons

    @classmethod
    def from_bytes(cls, data: bytes) -> ClassicPassthroughData:
        data = _require(data, 6, "classic passthrough data")
        return cls(
            left_stick_x=_bits(data[0], 1, 5) << 1,
            left_stick_y=_bits(data[1], 1, 5) << 1,
            right_stick_x=_classic_right_stick_x(data),
            right_stick_y=_bits(data[2], 0, 5),
            left_trigger=_classic_left_trigger(data),
            right_trigger=_bits(data[3], 0, 5),
            extension_connected=_bit(data[4], 0),
            motionplus_report=_bit(data[5], 1),
            buttons=_classic_buttons(data[4], data[5], _low(data[0], 0), _low(data[1], 0)),
        )


@dataclass(frozen=True)
class WiiUProData:
    """Wii U Pro controller data; buttons, charging and usb are True when active."""

    left_stick_x: int
    right_stick_x: int
    left_stick_y: int
    right_stick_y: int
    buttons: ClassicButtons
    lstick_press: bool
    rstick_press: bool
    charging: bool
    usb_connected: bool
    battery: int

    @classmethod
    def from_bytes(cls, data: bytes) -> WiiUProData:
        data = _require(data, 11, "Wii U Pro data")
        lx, rx, ly, ry = struct.unpack_from("<4H", data, 0)
        last = data[10]
        return cls(
            left_stick_x=lx,
            right_stick_x=rx,
            left_stick_y=ly,
            right_stick_y=ry,
            buttons=_classic_buttons(data[8], data[9], _low(data[9], 0), _low(data[9], 1)),
            rstick_press=_low(last, 0),
            lstick_press=_low(last, 1),
            charging=_low(last, 2),
            usb_connected=_low(last, 3),
            battery=_bits(last, 4, 3),
        )


@dataclass(frozen=True)
class MotionPlusData:
    """MotionPlus gyroscope data with 14-bit angular speeds."""

    yaw_speed: int
    roll_speed: int
    pitch_speed: int
    yaw_slow_mode: bool
    roll_slow_mode: bool
    pitch_slow_mode: bool
    extension_connected: bool
    motionplus_report: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> MotionPlusData:
        data = _require(data, 6, "MotionPlus data")
        third, fourth, fifth = data[3], data[4], data[5]
        return cls(
            yaw_speed=(_bits(third, 2, 6) << 8) | data[0],
            roll_speed=(_bits(fourth, 2, 6) << 8) | data[1],
            pitch_speed=(_bits(fifth, 2, 6) << 8) | data[2],
            yaw_slow_mode=_bit(third, 1),
            roll_slow_mode=_bit(fourth, 1),
            pitch_slow_mode=_bit(third, 0),
            extension_connected=_bit(fourth, 0),
            motionplus_report=_bit(fifth, 1),
        )


@dataclass(frozen=True)
class TaTaConData:
    """Taiko drum controller; True means the drum area is hit."""

    right_rim: bool
    right_center: bool
    left_rim: bool
    left_center: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> TaTaConData:
        data = _require(data, 6, "TaTaCon data")
        last = data[5]
        return cls(
            right_rim=_low(last, 3),
            right_center=_low(last, 4),
            left_rim=_low(last, 5),
            left_center=_low(last, 6),
        )


@dataclass(frozen=True)
class BalanceBoardData:
    """Raw balance board sensor readings, decoded from big-endian."""

    top_right: int
    bottom_right: int
    top_left: int
    bottom_left: int
    temperature: int
    battery: int

    @classmethod
    def from_bytes(cls, data: bytes) -> BalanceBoardData:
        data = _require(data, 11, "balance board data")
        top_right, bottom_right, top_left, bottom_left = struct.unpack_from(">4H", data, 0)
        return cls(
            top_right=top_right,
            bottom_right=bottom_right,
            top_left=top_left,
            bottom_left=bottom_left,
            temperature=data[8],
            battery=data[10],
        )