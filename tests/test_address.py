import pytest

from mcbridge.address import BluetoothAddress, parse_address


def test_to_hex_is_lowercase_without_separators():
    address = BluetoothAddress(bytes.fromhex("A1B2C3D4E5F6"))
    assert address.to_hex() == "a1b2c3d4e5f6"


def test_str_uses_colons():
    address = BluetoothAddress(bytes.fromhex("a1b2c3d4e5f6"))
    assert str(address) == "a1:b2:c3:d4:e5:f6"


def test_default_address_is_null():
    assert BluetoothAddress().is_null() is True
    assert BluetoothAddress().to_hex() == "00" * 6


def test_non_zero_address_is_not_null():
    assert BluetoothAddress(bytes([0, 0, 0, 0, 0, 1])).is_null() is False


def test_wrong_byte_count_rejected():
    with pytest.raises(ValueError):
        BluetoothAddress(bytes(5))
    with pytest.raises(ValueError):
        BluetoothAddress(bytes(7))


def test_equality_compares_bytes():
    first = BluetoothAddress(bytes.fromhex("010203040506"))
    second = BluetoothAddress(bytearray.fromhex("010203040506"))
    third = BluetoothAddress(bytes.fromhex("010203040507"))
    assert first == second
    assert first != third
    assert hash(first) == hash(second)


def test_parse_round_trip():
    text = "a1:b2:c3:d4:e5:f6"
    address = parse_address(text)
    assert str(address) == text
    assert bytes(address) == bytes.fromhex("a1b2c3d4e5f6")


def test_parse_is_case_insensitive():
    assert parse_address("AB:CD:EF:01:23:45") == parse_address("ab:cd:ef:01:23:45")


@pytest.mark.parametrize(
    "text",
    ["", "a1:b2:c3:d4:e5", "a1:b2:c3:d4:e5:f6:", "a1b2c3d4e5f6"],
)
def test_parse_rejects_wrong_length(text):
    with pytest.raises(ValueError):
        parse_address(text)


@pytest.mark.parametrize("text", ["a1-b2:c3:d4:e5:f6", "a1:b2:c3:d4:e5.f6"])
def test_parse_rejects_bad_separator(text):
    with pytest.raises(ValueError):
        parse_address(text)


def test_parse_non_hex_pair_reads_as_zero():
    address = parse_address("zz:01:02:03:04:05")
    assert bytes(address) == bytes([0, 1, 2, 3, 4, 5])