"""Mapping of Wii remote input reports onto an emulated Switch controller."""

from __future__ import annotations

from collections.abc import Callable

from .controller_state import (
    BATTERY_MAX,
    UINT12_MAX,
    EmulatedController,
    MotionVector,
    SwitchAnalogStick,
    Transport,
)
from .wii_reports import (
    AccelerometerCalibration,
    BalanceBoardCalibration,
    BalanceBoardData,
    ClassicControllerData,
    ClassicPassthroughData,
    MotionPlusCalibration,
    MotionPlusCalibrationData,
    MotionPlusData,
    NunchuckData,
    NunchuckPassthroughData,
    TaTaConData,
    WiiButtons,
    WiiExtension,
    WiiOrientation,
    WiiUProData,
)

NUNCHUCK_STICK_SCALE = UINT12_MAX / 0xB8
WIIU_STICK_SCALE = 2.0
LEFT_STICK_SCALE = UINT12_MAX / 0x3F
RIGHT_STICK_SCALE = UINT12_MAX / 0x1F

_DPAD_STICK_POSITIONS = (
    SwitchAnalogStick.MIN,
    SwitchAnalogStick.CENTER,
    SwitchAnalogStick.MAX,
)

_EASING_EXPONENT = 3.0
_EASING_SHIFT = 0.15


def calibrate_weight(raw: int, cal_0kg: int, cal_17kg: int, cal_34kg: int) -> float:
    """Convert a decoded balance board sensor reading to kilograms.

    Readings are interpolated between the 0, 17 and 34 kg calibration points.
    A degenerate upper segment (equal 17 and 34 kg points) reads as zero.
    """
    if raw < cal_0kg:
        return 0.0
    if raw < cal_17kg:
        return (17.0 * (raw - cal_0kg)) / (cal_17kg - cal_0kg)
    if cal_34kg == cal_17kg:
        return 0.0
    return (17.0 * (raw - cal_17kg)) / (cal_34kg - cal_17kg) + 17.0


def apply_easing(x: float) -> float:
    """Shape a normalised balance offset with a shifted cubic easing curve."""
    shifted = abs(x) + _EASING_SHIFT
    rising = shifted ** _EASING_EXPONENT
    falling = (1.0 - shifted) ** _EASING_EXPONENT
    sign = -1.0 if x < 0 else 1.0
    return rising / (rising + falling) * sign


def _to_u16(value: float) -> int:
    """Convert to an unsigned 16-bit integer, truncating and saturating."""
    return min(max(int(value), 0), 0xFFFF)


def _clamped_axis(value: float) -> int:
    return min(max(_to_u16(value), SwitchAnalogStick.MIN), SwitchAnalogStick.MAX)


def _masked_axis(value: float) -> int:
    return _to_u16(value) & UINT12_MAX


def _battery_from_byte(level: int) -> int:
    if level <= 0:
        return 0
    return min(BATTERY_MAX, (((level - 1) // 64) + 1) << 1)


def _require(report: bytes, size: int) -> None:
    if len(report) < size:
        raise ValueError(f"report {report[0]:#04x} truncated: {len(report)} < {size} bytes")


class WiiInputMapper(EmulatedController):
    """Turns Wii remote and extension reports into Switch controller state."""

    def __init__(self, transport: Transport, trigger_threshold: float = 0.5) -> None:
        super().__init__(transport, trigger_threshold)
        self.orientation = WiiOrientation.HORIZONTAL
        self.extension = WiiExtension.NONE
        self.mp_extension_flag = False
        self.mp_state_changing = False
        self.accel_calibration = AccelerometerCalibration()
        self.motion_plus_calibration = MotionPlusCalibrationData()
        self.balance_board_calibration = BalanceBoardCalibration()
        self._handlers: dict[int, tuple[int, Callable[[bytes], None]]] = {
            0x20: (7, self._map_report_0x20),
            0x21: (3, self._map_core_only),
            0x22: (3, self._map_core_only),
            0x30: (3, self._map_core_only),
            0x31: (6, self._map_report_0x31),
            0x32: (3, self._map_report_0x32),
            0x34: (3, self._map_report_0x34),
            0x35: (6, self._map_report_0x35),
            0x3D: (1, self._map_report_0x3d),
        }

    def process_input_data(self, report: bytes) -> bool:
        """Map a Wii input report; False when its id is not handled."""
        report = bytes(report)
        if not report:
            return False
        entry = self._handlers.get(report[0])
        if entry is None:
            return False
        size, handler = entry
        _require(report, size)
        handler(report)
        return True

    def _on_status_report(self, extension_connected: bool) -> None:
        """Called after a status report has been mapped."""

    def _schedule_status_query(self) -> None:
        """Called when the MotionPlus pass-through extension state starts changing."""

    def _map_core_only(self, report: bytes) -> None:
        self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))

    def _map_report_0x20(self, report: bytes) -> None:
        self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))
        if self.extension != WiiExtension.WIIU_PRO:
            self.battery = _battery_from_byte(report[6])
        self._on_status_report(bool((report[3] >> 1) & 1))

    def _map_report_0x31(self, report: bytes) -> None:
        self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))
        self.map_accelerometer(report[3:6], report[1:3])

    def _map_report_0x32(self, report: bytes) -> None:
        self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))
        self.map_extension(report[3:11])

    def _map_report_0x34(self, report: bytes) -> None:
        self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))
        self.map_extension(report[3:22])

    def _map_report_0x35(self, report: bytes) -> None:
        ext = report[6:22]
        interleaved_motion = (
            self.extension == WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH
            and len(ext) > 5
            and bool((ext[5] >> 1) & 1)
        )
        # An interleaved MotionPlus report would clobber classic controller buttons.
        if not interleaved_motion:
            self.map_core_buttons(WiiButtons.from_bytes(report[1:3]))
        self.map_accelerometer(report[3:6], report[1:3])
        self.map_extension(ext)

    def _map_report_0x3d(self, report: bytes) -> None:
        self.map_extension(report[1:22])

    def map_core_buttons(self, buttons: WiiButtons) -> None:
        """Map the remote's own buttons according to how it is held."""
        if self.extension == WiiExtension.WIIU_PRO:
            return

        state = self.buttons
        if self.orientation == WiiOrientation.HORIZONTAL:
            # The d-pad doubles as the left stick for games without d-pad movement.
            self.left_stick.set_data(
                _DPAD_STICK_POSITIONS[1 + buttons.dpad_down - buttons.dpad_up],
                _DPAD_STICK_POSITIONS[1 + buttons.dpad_right - buttons.dpad_left],
            )
            state.A = buttons.two
            state.B = buttons.one
            state.R = buttons.A
            state.L = buttons.B
        else:
            state.dpad_down = buttons.dpad_down
            state.dpad_up = buttons.dpad_up
            state.dpad_right = buttons.dpad_right
            state.dpad_left = buttons.dpad_left
            state.A = buttons.A
            state.B = buttons.B
            if self.extension in (
                WiiExtension.CLASSIC_PRO,
                WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH,
            ):
                state.lstick_press = buttons.one
                state.rstick_press = buttons.two
            else:
                state.R = buttons.one
                state.ZR = buttons.two
        state.minus = buttons.minus
        state.plus = buttons.plus
        state.home = buttons.home

    def map_accelerometer(self, accel: bytes, raw_buttons: bytes) -> None:
        """Map 10-bit accelerometer readings to g using the remote's calibration.

        Without a usable calibration the accelerometer state is left unchanged.
        """
        accel = bytes(accel)
        raw_buttons = bytes(raw_buttons)
        if len(accel) < 3 or len(raw_buttons) < 2:
            raise ValueError("accelerometer data needs 3 bytes and button data 2 bytes")

        cal = self.accel_calibration
        spans = (
            cal.acc_x_1g - cal.acc_x_0g,
            cal.acc_y_1g - cal.acc_y_0g,
            cal.acc_z_1g - cal.acc_z_0g,
        )
        if 0 in spans:
            return

        x_raw = (accel[0] << 2) | ((raw_buttons[0] >> 5) & 0x3)
        y_raw = (accel[1] << 2) | (((raw_buttons[1] >> 4) & 0x1) << 1)
        z_raw = (accel[2] << 2) | (((raw_buttons[1] >> 5) & 0x1) << 1)

        x = -float(x_raw - cal.acc_x_0g) / spans[0]
        y = -float(y_raw - cal.acc_y_0g) / spans[1]
        z = float(z_raw - cal.acc_z_0g) / spans[2]

        if self.orientation == WiiOrientation.HORIZONTAL:
            self.accel = MotionVector(x, y, z)
        else:
            self.accel = MotionVector(y, -x, z)

    def map_extension(self, ext: bytes) -> None:
        """Map extension bytes according to the connected extension."""
        ext = bytes(ext)
        extension = self.extension
        if extension == WiiExtension.NUNCHUCK:
            self._map_nunchuck(NunchuckData.from_bytes(ext))
        elif extension == WiiExtension.CLASSIC_PRO:
            self._map_classic(ClassicControllerData.from_bytes(ext))
        elif extension == WiiExtension.WIIU_PRO:
            self._map_wiiu_pro(WiiUProData.from_bytes(ext))
        elif extension == WiiExtension.TATACON:
            self._map_tatacon(TaTaConData.from_bytes(ext))
        elif extension == WiiExtension.BALANCE_BOARD:
            self._map_balance_board(BalanceBoardData.from_bytes(ext))
        elif extension in (
            WiiExtension.MOTION_PLUS,
            WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH,
            WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH,
        ):
            self._map_motion_plus(ext)

    def _map_nunchuck(self, data: NunchuckData | NunchuckPassthroughData) -> None:
        center = SwitchAnalogStick.CENTER
        self.left_stick.set_data(
            _clamped_axis(NUNCHUCK_STICK_SCALE * (data.stick_x - 0x80) + center),
            _clamped_axis(NUNCHUCK_STICK_SCALE * (data.stick_y - 0x80) + center),
        )
        self.buttons.L = data.C
        self.buttons.ZL = data.Z

    def _map_classic(self, data: ClassicControllerData | ClassicPassthroughData) -> None:
        center = SwitchAnalogStick.CENTER
        self.left_stick.set_data(
            _masked_axis(LEFT_STICK_SCALE * (data.left_stick_x - 0x20) + center),
            _masked_axis(LEFT_STICK_SCALE * (data.left_stick_y - 0x20) + center),
        )
        self.right_stick.set_data(
            _masked_axis(RIGHT_STICK_SCALE * (data.right_stick_x - 0x10) + center),
            _masked_axis(RIGHT_STICK_SCALE * (data.right_stick_y - 0x10) + center),
        )

        pressed = data.buttons
        state = self.buttons
        threshold = self.trigger_threshold * 0x1F

        state.dpad_down |= pressed.dpad_down
        state.dpad_up |= pressed.dpad_up
        state.dpad_right |= pressed.dpad_right
        state.dpad_left |= pressed.dpad_left

        state.A |= pressed.A
        state.B |= pressed.B
        state.X = pressed.X
        state.Y = pressed.Y

        state.L = pressed.L or data.left_trigger > threshold
        state.ZL = pressed.ZL
        state.R = pressed.R or data.right_trigger > threshold
        state.ZR = pressed.ZR

        state.minus |= pressed.minus
        state.plus |= pressed.plus
        state.home |= pressed.home

    def _map_wiiu_pro(self, data: WiiUProData) -> None:
        center = SwitchAnalogStick.CENTER

        def axis(value: int) -> int:
            return _clamped_axis(WIIU_STICK_SCALE * (value - center) + center)

        self.left_stick.set_data(axis(data.left_stick_x), axis(data.left_stick_y))
        self.right_stick.set_data(axis(data.right_stick_x), axis(data.right_stick_y))

        pressed = data.buttons
        state = self.buttons
        state.dpad_down = pressed.dpad_down
        state.dpad_up = pressed.dpad_up
        state.dpad_right = pressed.dpad_right
        state.dpad_left = pressed.dpad_left
        state.A = pressed.A
        state.B = pressed.B
        state.X = pressed.X
        state.Y = pressed.Y
        state.R = pressed.R
        state.ZR = pressed.ZR
        state.L = pressed.L
        state.ZL = pressed.ZL
        state.minus = pressed.minus
        state.plus = pressed.plus
        state.lstick_press = data.lstick_press
        state.rstick_press = data.rstick_press
        state.home = pressed.home

        self.ext_power = data.usb_connected
        self.charging = data.charging
        self.battery = 0 if data.battery == 0b111 else data.battery << 1

    def _map_tatacon(self, data: TaTaConData) -> None:
        self.buttons.X = data.right_rim
        self.buttons.Y = data.right_center
        self.buttons.dpad_up |= data.left_rim
        self.buttons.dpad_right |= data.left_center

    def _map_balance_board(self, data: BalanceBoardData) -> None:
        cal = self.balance_board_calibration
        top_right = calibrate_weight(
            data.top_right, cal.top_right_0kg, cal.top_right_17kg, cal.top_right_34kg
        )
        bottom_right = calibrate_weight(
            data.bottom_right, cal.bottom_right_0kg, cal.bottom_right_17kg, cal.bottom_right_34kg
        )
        top_left = calibrate_weight(
            data.top_left, cal.top_left_0kg, cal.top_left_17kg, cal.top_left_34kg
        )
        bottom_left = calibrate_weight(
            data.bottom_left, cal.bottom_left_0kg, cal.bottom_left_17kg, cal.bottom_left_34kg
        )
        total = top_right + bottom_right + top_left + bottom_left

        x = y = 0.0
        if total > 1.0:
            x = apply_easing(((top_right + bottom_right) - (top_left + bottom_left)) / total)
            y = apply_easing(((top_right + top_left) - (bottom_right + bottom_left)) / total)

        half = UINT12_MAX // 2
        center = SwitchAnalogStick.CENTER
        self.left_stick.set_data(
            _clamped_axis(x * half + center),
            _clamped_axis(y * half + center),
        )

    def _update_motion_plus_extension_status(self, extension_connected: bool) -> None:
        if self.mp_state_changing or extension_connected == self.mp_extension_flag:
            return
        self.mp_extension_flag = extension_connected
        self.mp_state_changing = True
        self._schedule_status_query()

    def _map_motion_plus(self, ext: bytes) -> None:
        data = MotionPlusData.from_bytes(ext)
        self._update_motion_plus_extension_status(data.extension_connected)

        if data.motionplus_report:
            self._map_gyro(data)
        elif self.extension == WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH:
            self._map_nunchuck(NunchuckPassthroughData.from_bytes(ext))
        elif self.extension == WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH:
            self._map_classic(ClassicPassthroughData.from_bytes(ext))

    def _map_gyro(self, data: MotionPlusData) -> None:
        """Map angular speeds; an unusable calibration leaves the gyro unchanged."""
        cal = self.motion_plus_calibration

        def mode(slow: bool) -> MotionPlusCalibration:
            return cal.slow if slow else cal.fast

        pitch_cal = mode(data.pitch_slow_mode)
        roll_cal = mode(data.roll_slow_mode)
        yaw_cal = mode(data.yaw_slow_mode)

        axes = (
            (data.pitch_speed << 2, pitch_cal.pitch_zero, pitch_cal.pitch_scale, pitch_cal),
            (data.roll_speed << 2, roll_cal.roll_zero, roll_cal.roll_scale, roll_cal),
            (data.yaw_speed << 2, yaw_cal.yaw_zero, yaw_cal.yaw_scale, yaw_cal),
        )
        speeds = []
        for raw, zero, scale, axis_cal in axes:
            degrees = 6 * axis_cal.degrees_div_6
            if degrees == 0 or scale == zero:
                return
            speeds.append(float(raw - zero) / (float(scale - zero) / degrees))

        pitch, roll, yaw = speeds[0], -speeds[1], -speeds[2]
        if self.orientation == WiiOrientation.HORIZONTAL:
            self.gyro = MotionVector(pitch, roll, yaw)
        else:
            self.gyro = MotionVector(roll, -pitch, yaw)