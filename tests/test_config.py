import pytest

from mcbridge.address import BluetoothAddress, parse_address
from mcbridge.config import (
    HOST_NAME_SIZE,
    MissionControlConfig,
    load_config,
    parse_boolean,
    parse_config,
    parse_int,
)


def test_defaults():
    config = MissionControlConfig()
    assert config.general.enable_rumble is True
    assert config.general.enable_motion is True
    assert config.bluetooth.host_name == ""
    assert config.bluetooth.host_address.is_null()
    assert config.misc.analog_trigger_activation_threshold == 50
    assert config.misc.dualshock3_led_mode == 0
    assert config.misc.dualshock4_polling_rate == 8
    assert config.misc.dualshock4_lightbar_brightness == 5
    assert config.misc.dualsense_lightbar_brightness == 5
    assert config.misc.dualsense_enable_player_leds is True
    assert config.misc.dualsense_vibration_intensity == 4


@pytest.mark.parametrize("value", ["true", "TRUE", "True"])
def test_parse_boolean_true(value):
    assert parse_boolean(value, False) is True


@pytest.mark.parametrize("value", ["false", "FALSE", "False"])
def test_parse_boolean_false(value):
    assert parse_boolean(value, True) is False


@pytest.mark.parametrize("current", [True, False])
def test_parse_boolean_unknown_keeps_current(current):
    assert parse_boolean("yes", current) is current


def test_parse_int_in_range():
    assert parse_int("42", 7, 0, 100) == 42


def test_parse_int_out_of_range_keeps_current():
    assert parse_int("101", 7, 0, 100) == 7
    assert parse_int("-1", 7, 0, 100) == 7


def test_parse_int_reads_leading_digits():
    assert parse_int("  42abc", 7, 0, 100) == 42


def test_parse_int_without_digits_reads_zero():
    assert parse_int("abc", 7, 0, 100) == 0
    assert parse_int("abc", 7, 1, 100) == 7


def test_parse_int_unbounded_by_default():
    assert parse_int("-123456", 0) == -123456


def test_apply_unknown_section_returns_false():
    config = MissionControlConfig()
    assert config.apply("nonsense", "enable_rumble", "false") is False
    assert config == MissionControlConfig()


def test_apply_unknown_name_in_known_section_returns_true():
    config = MissionControlConfig()
    assert config.apply("misc", "unknown_key", "3") is True
    assert config == MissionControlConfig()


def test_apply_is_case_insensitive():
    config = MissionControlConfig()
    assert config.apply("GENERAL", "Enable_Rumble", "false") is True
    assert config.general.enable_rumble is False


def test_apply_misc_ranges():
    config = MissionControlConfig()
    config.apply("misc", "dualsense_vibration_intensity", "0")
    assert config.misc.dualsense_vibration_intensity == 4
    config.apply("misc", "dualsense_vibration_intensity", "8")
    assert config.misc.dualsense_vibration_intensity == 8
    config.apply("misc", "dualshock3_led_mode", "3")
    assert config.misc.dualshock3_led_mode == 0
    config.apply("misc", "dualshock4_polling_rate", "16")
    assert config.misc.dualshock4_polling_rate == 16


def test_apply_host_name_truncated():
    config = MissionControlConfig()
    config.apply("bluetooth", "host_name", "x" * 50)
    assert config.bluetooth.host_name == "x" * HOST_NAME_SIZE


def test_apply_host_address():
    config = MissionControlConfig()
    config.apply("bluetooth", "host_address", "0a:0b:0c:0d:0e:0f")
    assert config.bluetooth.host_address == parse_address("0a:0b:0c:0d:0e:0f")


def test_apply_invalid_host_address_ignored():
    config = MissionControlConfig()
    config.apply("bluetooth", "host_address", "not an address")
    assert config.bluetooth.host_address == BluetoothAddress()


def test_parse_config_text():
    text = (
        "; leading comment\n"
        "[general]\n"
        "enable_rumble = false\n"
        "enable_motion=true ; inline comment\n"
        "# another comment\n"
        "[bluetooth]\n"
        "host_name = MyHost\n"
        "host_address = 0a:0b:0c:0d:0e:0f\n"
        "[misc]\n"
        "analog_trigger_activation_threshold = 75\n"
        "dualsense_enable_player_leds = false\n"
        "[other]\n"
        "ignored = 1\n"
        "a line without separator\n"
    )
    config = parse_config(text)
    assert config.general.enable_rumble is False
    assert config.general.enable_motion is True
    assert config.bluetooth.host_name == "MyHost"
    assert config.bluetooth.host_address == parse_address("0a:0b:0c:0d:0e:0f")
    assert config.misc.analog_trigger_activation_threshold == 75
    assert config.misc.dualsense_enable_player_leds is False


def test_parse_config_empty_is_default():
    assert parse_config("") == MissionControlConfig()


def test_load_config_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "missing.ini") == MissionControlConfig()


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "missioncontrol.ini"
    path.write_text("[misc]\ndualshock4_lightbar_brightness = 9\n", encoding="utf-8")
    assert load_config(path).misc.dualshock4_lightbar_brightness == 9