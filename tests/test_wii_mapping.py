import struct

import pytest

from mcbridge.controller_state import BATTERY_MAX, SwitchAnalogStick
from mcbridge.wii_mapping import WiiInputMapper, apply_easing, calibrate_weight
from mcbridge.wii_reports import (
    AccelerometerCalibration,
    BalanceBoardCalibration,
    MotionPlusCalibration,
    MotionPlusCalibrationData,
    WiiExtension,
    WiiOrientation,
)

RELEASED_CLASSIC = [0xFF, 0xFF]


def _transport(data, response_id):
    return None


@pytest.fixture
def mapper():
    return WiiInputMapper(_transport, 0.5)


def _classic_ext(buttons=RELEASED_CLASSIC, left_trigger=0):
    # Sticks centred: left 0x20, right 0x10.
    byte0 = 0x20 | 0x80
    byte1 = 0x20
    byte2 = 0x10 | ((left_trigger >> 3) & 0x3) << 5
    byte3 = (left_trigger & 0x7) << 5
    return bytes([byte0, byte1, byte2, byte3, *buttons])


def test_calibrate_weight_points():
    assert calibrate_weight(50, 100, 1000, 2000) == 0.0
    assert calibrate_weight(100, 100, 1000, 2000) == 0.0
    assert calibrate_weight(1000, 100, 1000, 2000) == 17.0
    assert calibrate_weight(2000, 100, 1000, 2000) == 34.0


def test_calibrate_weight_degenerate_upper_segment():
    assert calibrate_weight(1500, 0, 1000, 1000) == 0.0


def test_apply_easing_fixed_points():
    assert apply_easing(0.85) == pytest.approx(1.0)
    assert apply_easing(0.35) == pytest.approx(0.5)


def test_apply_easing_is_odd_and_monotonic():
    values = [0.05, 0.2, 0.4, 0.6, 0.8]
    eased = [apply_easing(v) for v in values]
    assert eased == sorted(eased)
    for v in values:
        assert apply_easing(-v) == pytest.approx(-apply_easing(v))


def test_unknown_and_empty_reports(mapper):
    assert mapper.process_input_data(bytes([0x99, 0, 0])) is False
    assert mapper.process_input_data(b"") is False


def test_truncated_report_raises(mapper):
    with pytest.raises(ValueError):
        mapper.process_input_data(bytes([0x31, 0, 0]))


def test_horizontal_core_buttons(mapper):
    assert mapper.process_input_data(bytes([0x30, 0x08, 0x01])) is True
    assert mapper.left_stick.x == SwitchAnalogStick.MIN
    assert mapper.left_stick.y == SwitchAnalogStick.CENTER
    assert mapper.buttons.A is True
    assert mapper.buttons.B is False


def test_vertical_core_buttons(mapper):
    mapper.orientation = WiiOrientation.VERTICAL
    mapper.extension = WiiExtension.NUNCHUCK
    mapper.map_core_buttons_report = None
    mapper.process_input_data(bytes([0x30, 0x08, 0x03]))
    assert mapper.buttons.dpad_up is True
    assert mapper.buttons.R is True
    assert mapper.buttons.ZR is True
    assert mapper.buttons.lstick_press is False


def test_vertical_classic_maps_one_two_to_stick_press(mapper):
    mapper.orientation = WiiOrientation.VERTICAL
    mapper.extension = WiiExtension.CLASSIC_PRO
    mapper.process_input_data(bytes([0x30, 0x00, 0x02]))
    assert mapper.buttons.lstick_press is True
    assert mapper.buttons.rstick_press is False


def test_wiiu_pro_ignores_core_buttons_and_battery(mapper):
    mapper.extension = WiiExtension.WIIU_PRO
    mapper.battery = 4
    mapper.process_input_data(bytes([0x20, 0x00, 0x08, 0x00, 0, 0, 0xFF]))
    assert mapper.buttons.R is False
    assert mapper.battery == 4


def test_status_report_battery(mapper):
    mapper.process_input_data(bytes([0x20, 0x00, 0x00, 0x00, 0, 0, 0xFF]))
    assert mapper.battery == BATTERY_MAX
    mapper.process_input_data(bytes([0x20, 0x00, 0x00, 0x00, 0, 0, 0x00]))
    assert mapper.battery == 0


def test_accelerometer_horizontal_and_vertical(mapper):
    mapper.accel_calibration = AccelerometerCalibration(512, 512, 512, 612, 612, 612)
    mapper.process_input_data(bytes([0x31, 0, 0, 153, 128, 153]))
    assert mapper.accel.x == pytest.approx(-1.0)
    assert mapper.accel.y == pytest.approx(0.0)
    assert mapper.accel.z == pytest.approx(1.0)

    mapper.orientation = WiiOrientation.VERTICAL
    mapper.process_input_data(bytes([0x31, 0, 0, 153, 128, 153]))
    assert mapper.accel.x == pytest.approx(0.0)
    assert mapper.accel.y == pytest.approx(1.0)


def test_accelerometer_without_calibration_is_unchanged(mapper):
    mapper.process_input_data(bytes([0x31, 0, 0, 200, 200, 200]))
    assert (mapper.accel.x, mapper.accel.y, mapper.accel.z) == (0.0, 0.0, 0.0)


def test_nunchuck_stick_and_buttons(mapper):
    mapper.extension = WiiExtension.NUNCHUCK
    mapper.map_extension(bytes([0x80, 0x80, 0, 0, 0, 0xFF]))
    assert (mapper.left_stick.x, mapper.left_stick.y) == (SwitchAnalogStick.CENTER,) * 2
    assert mapper.buttons.L is False
    mapper.map_extension(bytes([0xFF, 0x00, 0, 0, 0, 0xFC]))
    assert mapper.left_stick.x == SwitchAnalogStick.MAX
    assert mapper.left_stick.y == SwitchAnalogStick.MIN
    assert mapper.buttons.L is True
    assert mapper.buttons.ZL is True


def test_classic_centered_and_buttons(mapper):
    mapper.extension = WiiExtension.CLASSIC_PRO
    mapper.map_extension(_classic_ext())
    assert (mapper.left_stick.x, mapper.left_stick.y) == (SwitchAnalogStick.CENTER,) * 2
    assert (mapper.right_stick.x, mapper.right_stick.y) == (SwitchAnalogStick.CENTER,) * 2
    assert mapper.buttons.L is False
    mapper.map_extension(_classic_ext(buttons=[0xFF, 0xEF]))
    assert mapper.buttons.A is True


def test_classic_full_trigger_presses_l(mapper):
    mapper.extension = WiiExtension.CLASSIC_PRO
    mapper.map_extension(_classic_ext(left_trigger=31))
    assert mapper.buttons.L is True
    assert mapper.buttons.R is False


def test_classic_keeps_core_presses(mapper):
    mapper.orientation = WiiOrientation.VERTICAL
    mapper.extension = WiiExtension.CLASSIC_PRO
    report = bytes([0x32, 0x00, 0x08]) + _classic_ext()
    mapper.process_input_data(report)
    assert mapper.buttons.A is True
    assert mapper.buttons.X is False


def test_wiiu_pro_extension(mapper):
    mapper.extension = WiiExtension.WIIU_PRO
    ext = struct.pack("<4H", 2048, 0, 2048, 2048) + bytes([0xFF, 0xFF, 0x0F | (4 << 4)])
    mapper.map_extension(ext)
    assert mapper.left_stick.x == SwitchAnalogStick.CENTER
    assert mapper.right_stick.x == SwitchAnalogStick.MIN
    assert mapper.battery == 8
    assert mapper.charging is False
    assert mapper.ext_power is False
    mapper.map_extension(ext[:10] + bytes([0x0F | (0b111 << 4)]))
    assert mapper.battery == 0


def test_tatacon(mapper):
    mapper.extension = WiiExtension.TATACON
    mapper.map_extension(bytes([0, 0, 0, 0, 0, 0xFF & ~0x08]))
    assert mapper.buttons.X is True
    assert mapper.buttons.Y is False


def _board_ext(tr, br, tl, bl):
    return struct.pack(">4H", tr, br, tl, bl) + bytes([20, 0, 100])


def test_balance_board(mapper):
    mapper.extension = WiiExtension.BALANCE_BOARD
    mapper.balance_board_calibration = BalanceBoardCalibration(
        *([0] * 4), *([1000] * 4), *([2000] * 4)
    )
    mapper.map_extension(_board_ext(0, 0, 0, 0))
    assert (mapper.left_stick.x, mapper.left_stick.y) == (SwitchAnalogStick.CENTER,) * 2

    mapper.map_extension(_board_ext(1500, 1500, 1500, 1500))
    assert mapper.left_stick.x == mapper.left_stick.y
    assert mapper.left_stick.x > SwitchAnalogStick.CENTER

    mapper.map_extension(_board_ext(2000, 2000, 0, 0))
    assert mapper.left_stick.x == SwitchAnalogStick.MAX
    assert mapper.left_stick.y < SwitchAnalogStick.MAX


def _mp_calibration():
    axis = MotionPlusCalibration(0x8000, 0x8000, 0x8000, 0x8000 + 1000, 0x8000 + 1000,
                                 0x8000 + 1000, 100)
    return MotionPlusCalibrationData(fast=axis, slow=axis)


def test_motion_plus_gyro(mapper):
    mapper.extension = WiiExtension.MOTION_PLUS
    mapper.motion_plus_calibration = _mp_calibration()
    ext = bytes([0x00, 0x00, 0xFA, 0x80, 0x80, 0x82]) + bytes(10)
    mapper.process_input_data(bytes([0x35, 0, 0, 128, 128, 128]) + ext)
    assert mapper.gyro.x == pytest.approx(600.0)
    assert mapper.gyro.y == pytest.approx(0.0)
    assert mapper.gyro.z == pytest.approx(0.0)


def test_motion_plus_extension_state_change(mapper):
    mapper.extension = WiiExtension.MOTION_PLUS
    mapper.map_extension(bytes([0, 0, 0, 0x80, 0x81, 0x82]))
    assert mapper.mp_extension_flag is True
    assert mapper.mp_state_changing is True
    mapper.map_extension(bytes([0, 0, 0, 0x80, 0x80, 0x82]))
    assert mapper.mp_extension_flag is True


def test_nunchuck_passthrough(mapper):
    mapper.extension = WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH
    mapper.map_extension(bytes([0x80, 0x80, 0, 0, 0, 0xFF & ~0x08 & ~0x02]))
    assert mapper.buttons.L is True
    assert mapper.buttons.ZL is False
    assert mapper.left_stick.x == SwitchAnalogStick.CENTER


def test_classic_passthrough_skips_core_on_motion_report(mapper):
    mapper.orientation = WiiOrientation.VERTICAL
    mapper.extension = WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH
    motion_ext = bytes([0, 0, 0, 0x80, 0x80, 0x82]) + bytes(10)
    mapper.process_input_data(bytes([0x35, 0x00, 0x08, 128, 128, 128]) + motion_ext)
    assert mapper.buttons.A is False

    classic_ext = bytes([0x21 | 0x80, 0x21, 0x10, 0x00, 0xFE, 0xFD]) + bytes(10)
    mapper.process_input_data(bytes([0x35, 0x00, 0x08, 128, 128, 128]) + classic_ext)
    assert mapper.buttons.A is True
    assert mapper.left_stick.x == SwitchAnalogStick.CENTER