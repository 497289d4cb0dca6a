"""Wii remote, Balance Board and Wii U Pro controller support."""

from __future__ import annotations

import struct
import threading
import time
from collections.abc import Callable
from typing import Any

from .controller_state import Transport
from .wii_mapping import WiiInputMapper
from .wii_reports import (
    AccelerometerCalibration,
    BalanceBoardCalibration,
    MotionPlusCalibration,
    MotionPlusCalibrationData,
    MotionPlusStatus,
    WiiExtension,
    WiiOrientation,
    extension_from_id,
)

WIIMOTE_PRODUCT_ID = 0x0306

INIT_DATA_1 = bytes([0x55])
INIT_DATA_2 = bytes([0x00])

_ACCEL_CALIBRATION_ADDRESS = 0x0016
_EXTENSION_ID_ADDRESS = 0x04A400FC
_EXTENSION_INIT_ADDRESS = 0x04A400F0
_EXTENSION_INIT_ADDRESS_2 = 0x04A400FB
_ACTIVE_MOTION_PLUS_ID_ADDRESS = 0x04A400FE
_MOTION_PLUS_ID_ADDRESS = 0x04A600FE
_MOTION_PLUS_INIT_ADDRESS = 0x04A600F0
_MOTION_PLUS_CALIBRATION_ADDRESS = 0x04A60020
_BALANCE_BOARD_CALIBRATION_ADDRESS = 0x04A40020

_MOTION_PLUS_MODE_IDS = frozenset({0x0405, 0x0505, 0x0705})
_MAX_ATTEMPTS = 2
_MAX_WRITE_SIZE = 16

_MOTION_PLUS_CALIBRATION = struct.Struct(">6HB")

_EXTENSION_MODES = {
    WiiExtension.NUNCHUCK: (WiiOrientation.VERTICAL, 0x35),
    WiiExtension.CLASSIC_PRO: (WiiOrientation.VERTICAL, 0x35),
    WiiExtension.TATACON: (WiiOrientation.VERTICAL, 0x35),
    WiiExtension.BALANCE_BOARD: (WiiOrientation.VERTICAL, 0x34),
    WiiExtension.WIIU_PRO: (WiiOrientation.HORIZONTAL, 0x34),
    WiiExtension.MOTION_PLUS: (WiiOrientation.HORIZONTAL, 0x35),
    WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH: (WiiOrientation.VERTICAL, 0x35),
    WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH: (WiiOrientation.VERTICAL, 0x35),
}
_DEFAULT_MODE = (WiiOrientation.HORIZONTAL, 0x31)

_PASSTHROUGH = (
    WiiExtension.MOTION_PLUS_NUNCHUCK_PASSTHROUGH,
    WiiExtension.MOTION_PLUS_CLASSIC_PASSTHROUGH,
)


def _start_daemon(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


def _motion_plus_calibration(block: bytes) -> MotionPlusCalibration:
    values = _MOTION_PLUS_CALIBRATION.unpack_from(block, 0)
    return MotionPlusCalibration(*values)


class WiiController(WiiInputMapper):
    """A Wii remote or Wii U Pro controller driven over its memory interface.

    ``run_async`` runs background work such as reacting to status reports;
    by default each task gets its own daemon thread.
    """

    HARDWARE_IDS = (
        (0x057E, 0x0306),
        (0x057E, 0x0330),
    )

    def __init__(
        self,
        transport: Transport,
        product_id: int,
        trigger_threshold: float = 0.5,
        enable_motion: bool = True,
    ) -> None:
        super().__init__(transport, trigger_threshold)
        self.product_id = product_id
        self.enable_motion = enable_motion
        self.rumble = False
        self.memory_access_delay = 0.03
        self.status_query_delay = 0.25
        self.run_async: Callable[[Callable[[], None]], None] = _start_daemon

    def initialize(self) -> None:
        """Select the accelerometer report mode, read calibration, request status."""
        self.set_report_mode(0x31)
        if self.product_id == WIIMOTE_PRODUCT_ID:
            self.accel_calibration = self.get_accelerometer_calibration()
        self.query_status()

    def _reply(self, report: bytes, response_id: int, size: int) -> bytes:
        reply = self.write_data_report(report, response_id)
        if reply is None or len(reply) < size:
            raise OSError(f"no usable reply {response_id:#04x} to report {report[0]:#04x}")
        return bytes(reply)

    def read_memory(self, address: int, size: int) -> bytes:
        """Read device memory; raises OSError if the device reports an error twice."""
        if not 1 <= size <= 0xFFFF:
            raise ValueError(f"read size out of range: {size}")
        time.sleep(self.memory_access_delay)
        report = bytes([0x17]) + struct.pack(">IH", address & 0xFFFFFFFF, size)
        with self._output_lock:
            error = 0
            for _ in range(_MAX_ATTEMPTS):
                reply = self._reply(report, 0x21, 22)
                error = reply[3] & 0x0F
                if error == 0:
                    length = (reply[3] >> 4) + 1
                    return reply[6:6 + length]
        raise OSError(f"reading {size} bytes at {address:#010x} failed with error {error}")

    def _read_exact(self, address: int, size: int) -> bytes:
        data = self.read_memory(address, size)
        if len(data) < size:
            raise OSError(f"short read at {address:#010x}: {len(data)} < {size} bytes")
        return data[:size]

    def write_memory(self, address: int, data: bytes) -> None:
        """Write up to 16 bytes of device memory; raises OSError on a repeated error."""
        data = bytes(data)
        if not 1 <= len(data) <= _MAX_WRITE_SIZE:
            raise ValueError(f"write size must be 1 to {_MAX_WRITE_SIZE} bytes: {len(data)}")
        time.sleep(self.memory_access_delay)
        report = (
            bytes([0x16])
            + struct.pack(">IB", address & 0xFFFFFFFF, len(data))
            + data.ljust(_MAX_WRITE_SIZE, b"\x00")
        )
        with self._output_lock:
            error = 0
            for _ in range(_MAX_ATTEMPTS):
                reply = self._reply(report, 0x22, 5)
                error = reply[4]
                if error == 0:
                    return
        raise OSError(f"writing {len(data)} bytes at {address:#010x} failed with error {error}")

    def set_report_mode(self, mode: int) -> bytes | None:
        """Select the input report the remote sends."""
        return self.write_data_report(bytes([0x12, int(self.rumble), mode & 0xFF]))

    def query_status(self) -> bytes | None:
        """Ask the remote for a status report."""
        return self.write_data_report(bytes([0x15, int(self.rumble)]))

    def get_extension_type(self) -> WiiExtension:
        """Identify the connected extension; a failed read counts as none."""
        try:
            raw = self._read_exact(_EXTENSION_ID_ADDRESS, 4)
        except OSError:
            return WiiExtension.NONE
        return extension_from_id(int.from_bytes(raw, "big"))

    def get_motion_plus_status(self) -> MotionPlusStatus:
        """Report whether a MotionPlus is present, and whether it is active."""
        try:
            inactive_id = int.from_bytes(self._read_exact(_MOTION_PLUS_ID_ADDRESS, 2), "big")
        except OSError:
            inactive_id = None
        if inactive_id == 0x0005:
            return MotionPlusStatus.UNINITIALISED
        if inactive_id in _MOTION_PLUS_MODE_IDS:
            return MotionPlusStatus.INACTIVE

        try:
            active_id = int.from_bytes(self._read_exact(_ACTIVE_MOTION_PLUS_ID_ADDRESS, 2), "big")
        except OSError:
            return MotionPlusStatus.NONE
        if active_id in _MOTION_PLUS_MODE_IDS:
            return MotionPlusStatus.ACTIVE
        return MotionPlusStatus.NONE

    def get_accelerometer_calibration(self) -> AccelerometerCalibration:
        """Read the 10-bit accelerometer calibration stored in the remote."""
        raw = self._read_exact(_ACCEL_CALIBRATION_ADDRESS, 10)

        def value(high: int, low_byte: int, shift: int) -> int:
            return (high << 2) | ((low_byte >> shift) & 0x3)

        return AccelerometerCalibration(
            acc_x_0g=value(raw[0], raw[3], 4),
            acc_y_0g=value(raw[1], raw[3], 2),
            acc_z_0g=value(raw[2], raw[3], 0),
            acc_x_1g=value(raw[4], raw[7], 4),
            acc_y_1g=value(raw[5], raw[7], 2),
            acc_z_1g=value(raw[6], raw[7], 0),
        )

    def _read_block(self, address: int) -> bytes:
        return self._read_exact(address, 16) + self._read_exact(address + 0x10, 16)

    def get_motion_plus_calibration(self) -> MotionPlusCalibrationData:
        """Read the fast and slow mode MotionPlus calibration."""
        raw = self._read_block(_MOTION_PLUS_CALIBRATION_ADDRESS)
        return MotionPlusCalibrationData(
            fast=_motion_plus_calibration(raw[0:16]),
            slow=_motion_plus_calibration(raw[16:32]),
        )

    def get_balance_board_calibration(self) -> BalanceBoardCalibration:
        """Read the 0, 17 and 34 kg calibration of every balance board sensor."""
        raw = self._read_block(_BALANCE_BOARD_CALIBRATION_ADDRESS)
        return BalanceBoardCalibration(*struct.unpack_from(">12H", raw, 4))

    def _initialize_standard_extension(self) -> None:
        self.write_memory(_EXTENSION_INIT_ADDRESS, INIT_DATA_1)
        self.write_memory(_EXTENSION_INIT_ADDRESS_2, INIT_DATA_2)

    def _initialize_motion_plus(self) -> None:
        self.write_memory(_MOTION_PLUS_INIT_ADDRESS, INIT_DATA_1)
        self.motion_plus_calibration = self.get_motion_plus_calibration()

    def _activate_motion_plus(self, mode: int = 0x04) -> None:
        self.write_memory(_MOTION_PLUS_ID_ADDRESS, bytes([mode]))

    def _deactivate_motion_plus(self) -> None:
        self.write_memory(_EXTENSION_INIT_ADDRESS, INIT_DATA_1)

    def _select_extension(self, extension: WiiExtension) -> None:
        orientation, mode = _EXTENSION_MODES.get(extension, _DEFAULT_MODE)
        if extension == WiiExtension.BALANCE_BOARD:
            self.balance_board_calibration = self.get_balance_board_calibration()
        self.orientation = orientation
        self.set_report_mode(mode)
        self.extension = extension

    def _reset_extension(self) -> None:
        self.extension = WiiExtension.NONE
        self.orientation = WiiOrientation.HORIZONTAL
        self.set_report_mode(0x31)

    def handle_status_report(self, extension_connected: bool) -> None:
        """React to a status report: set up whatever extension is plugged in."""
        if not extension_connected:
            status = self.get_motion_plus_status()
            if status == MotionPlusStatus.NONE or not self.enable_motion:
                self._reset_extension()
            else:
                if status == MotionPlusStatus.UNINITIALISED:
                    self._initialize_motion_plus()
                self._activate_motion_plus()
            return

        if self.product_id == WIIMOTE_PRODUCT_ID and self.enable_motion:
            status = self.get_motion_plus_status()
            if status not in (MotionPlusStatus.NONE, MotionPlusStatus.ACTIVE):
                if status == MotionPlusStatus.UNINITIALISED:
                    self._initialize_motion_plus()
                self._activate_motion_plus()
                return

        extension = self.get_extension_type()
        if extension == WiiExtension.NONE:
            self._initialize_standard_extension()
            extension = self.get_extension_type()
        if self.extension != extension:
            self._select_extension(extension)

        if not self.mp_state_changing:
            return
        if self.mp_extension_flag:
            if self.extension == WiiExtension.MOTION_PLUS:
                # Identifying the extension also deactivates the MotionPlus.
                self._initialize_standard_extension()
                extension = self.get_extension_type()
                if extension == WiiExtension.NUNCHUCK:
                    self._activate_motion_plus(0x05)
                else:
                    self._activate_motion_plus(0x07)
                self.query_status()
        elif self.extension in _PASSTHROUGH:
            self._deactivate_motion_plus()
            self._reset_extension()
        self.mp_state_changing = False

    def _quietly(self, action: Callable[[], Any]) -> None:
        try:
            action()
        except (OSError, ValueError):
            pass

    def _on_status_report(self, extension_connected: bool) -> None:
        self.run_async(lambda: self._quietly(lambda: self.handle_status_report(extension_connected)))

    def _delayed_status_query(self) -> None:
        time.sleep(self.status_query_delay)
        self.query_status()

    def _schedule_status_query(self) -> None:
        self.run_async(lambda: self._quietly(self._delayed_status_query))

    def set_vibration(self, motor_data: Any) -> bytes | None:
        """Switch rumble on if any motor amplitude is above zero."""
        self.rumble = (
            motor_data.left_motor.low_band_amp > 0
            or motor_data.left_motor.high_band_amp > 0
            or motor_data.right_motor.low_band_amp > 0
            or motor_data.right_motor.high_band_amp > 0
        )
        return self.write_data_report(bytes([0x10, int(self.rumble)]))

    def cancel_vibration(self) -> bytes | None:
        """Switch rumble off."""
        self.rumble = False
        return self.write_data_report(bytes([0x10, 0x00]))

    def set_player_led(self, led_mask: int) -> bytes | None:
        """Light the player LEDs given by the low four bits of ``led_mask``."""
        return self.write_data_report(bytes([0x11, int(self.rumble) | ((led_mask & 0xF) << 4)]))