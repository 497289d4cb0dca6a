# mcbridge

`mcbridge` turns raw HID reports from third-party Bluetooth controllers into
the button, stick and motion state of an emulated Switch Pro controller. It
also reads the `missioncontrol.ini` configuration file, tracks which
application is running, sets the Bluetooth adapter's host address and name,
and offers a service object for version queries and raw HCI commands.

Controllers with input mapping:

- Xbox One controllers (`mcbridge.xbox_one.XboxOneController`)
- the Xiaomi Mi controller (`mcbridge.xiaomi.XiaomiController`)
- Wii Remotes, the Wii U Pro controller and Wii extensions: Nunchuck,
  Classic / Classic Pro, MotionPlus with pass-through, the Taiko drum
  (TaTaCon) and the Balance Board (`mcbridge.wii_controller.WiiController`)

It has no dependencies outside the standard library and needs Python 3.10
or later.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

`mcbridge.config.parse_config` reads the text of an INI file and returns a
`MissionControlConfig` with `general`, `bluetooth` and `misc` sections;
`load_config` does the same for a path and returns the defaults when the
file cannot be opened. Section and key names are matched without regard to
case. Values that fail to parse or fall outside their allowed range are
ignored and the previous value stays; a host name is cut to 32 bytes.

```ini
[general]
enable_rumble = true
enable_motion = true

[bluetooth]
host_name = Living Room
host_address = aa:bb:cc:dd:ee:ff

[misc]
analog_trigger_activation_threshold = 50
dualshock3_led_mode = 0
dualshock4_polling_rate = 8
dualshock4_lightbar_brightness = 5
dualsense_lightbar_brightness = 5
dualsense_enable_player_leds = true
dualsense_vibration_intensity = 4
```

```python
from mcbridge.config import load_config

config = load_config("missioncontrol.ini")
config.apply("misc", "dualshock3_led_mode", "2")   # True: known section
config.misc.dualshock3_led_mode                    # 2
```

`apply(section, name, value)` returns `False` for an unknown section. The
lower-level parsers `parse_boolean(value, current)` and
`parse_int(value, current, minimum, maximum)` return the parsed value, or
`current` when the text is rejected.

## Bluetooth addresses

```python
from mcbridge.address import parse_address

address = parse_address("aa:bb:cc:dd:ee:ff")
address.to_hex()    # "aabbccddeeff"
address.is_null()   # False
str(address)        # "aa:bb:cc:dd:ee:ff"
```

`parse_address` raises `ValueError` when the text is not 17 characters long
or a separator is not a colon.

## CRC-8

```python
from mcbridge.crc8 import Crc8

crc = Crc8(0x07)
checksum = crc.calculate(b"\x01\x02\x03", 0x00)
```

## Controllers

Every controller is built on `mcbridge.controller_state.EmulatedController`,
which holds `buttons` (`SwitchButtons`), `left_stick` and `right_stick`
(`SwitchAnalogStick`, 12-bit axes), `accel` and `gyro` (`MotionVector`),
and `battery`, `charging` and `ext_power`.

A controller is given a *transport*: a callable taking the output report
bytes and an optional response report id, which sends the report and, when
an id is given, returns the device's matching input report. Feed incoming
reports to `process_input_data`; it returns `True` when the report id was
recognised and raises `ValueError` for a truncated report.

```python
from mcbridge.xbox_one import XboxOneController

def transport(report, response_id):
    ...  # send `report` to the device; return the reply when response_id is set

pad = XboxOneController(transport, 0.5)
pad.process_input_data(report_bytes)
pad.buttons.A, pad.left_stick.x
```

`XboxOneController.set_vibration` and `WiiController.set_vibration` take an
object with `left_motor` and `right_motor`, each having `low_band_amp` and
`high_band_amp`. `XiaomiController.initialize` sends the packet that enables
vibration.

`WiiController(transport, product_id, trigger_threshold, enable_motion)`
also reads and writes controller memory (`read_memory`, `write_memory`,
raising `OSError` when the device reports an error twice), reads calibration
data (`get_accelerometer_calibration`, `get_motion_plus_calibration`,
`get_balance_board_calibration`), detects the connected extension with
`get_extension_type` and `get_motion_plus_status`, and switches report mode
and orientation as extensions come and go through `handle_status_report`.
Status reports received by `process_input_data` hand this work to
`run_async`, which by default starts a daemon thread per task.
`set_player_led` and `cancel_vibration` drive the LEDs and rumble.

The report layouts and extension decoders live in `mcbridge.wii_reports`,
and the mapping of Wii reports onto Switch state in
`mcbridge.wii_mapping.WiiInputMapper`, together with `calibrate_weight` and
`apply_easing` used for the Balance Board.

## Running application

`mcbridge.process_monitor.ProcessMonitor(query)` calls `query` for the
program id of the running application; a `ProcessNotFoundError` counts as
the home menu. `check_for_process_switch()` returns `True` when the id has
changed, and `wait_for_switch(timeout)` waits for such a change.

## Host overrides

`mcbridge.host_override.apply_host_overrides(adapter, config, legacy)` sets
the adapter's address and name from the configuration through
`adapter.set_property`, skipping an all-zero address and an empty name, and
returns the `AdapterProperty` values written.

## Service

`mcbridge.service.MissionControlService(build, backend)` answers
`get_version`, `get_build_version_string` and `get_build_date_string` from a
`BuildInfo`, and forwards `get_hci_handle` and `send_hci_command` to a
backend, raising `HciCommandError` when the reply carries a failure status.
`encode_version("v1.2.3")` returns `0x010203`, and
`BuildInfo.from_tag(tag, branch, commit, build_date)` builds the
`tag-branch-commit` build name.

## What it does not do

`mcbridge` does not open Bluetooth or USB connections itself: reports come
from, and go to, the transport, adapter and backend objects you supply. It
has no command-line tool and runs no server. The configuration keys for
DualShock and DualSense controllers are read and kept, but the package has
no input mapping for those controllers.