import pytest

from mcbridge.crc8 import Crc8

POLYNOMIALS = [0x07, 0x1D, 0x31, 0x9B]


def test_standard_check_value():
    assert Crc8(0x07).calculate(b"123456789") == 0xF4


@pytest.mark.parametrize("polynomial", POLYNOMIALS)
@pytest.mark.parametrize("seed", [0x00, 0x5A, 0xFF])
def test_empty_data_returns_seed(polynomial, seed):
    assert Crc8(polynomial).calculate(b"", seed) == seed


@pytest.mark.parametrize("polynomial", POLYNOMIALS)
def test_single_one_byte_yields_polynomial(polynomial):
    assert Crc8(polynomial).calculate(bytes([1])) == polynomial


@pytest.mark.parametrize("polynomial", POLYNOMIALS)
def test_chaining_matches_whole(polynomial):
    crc = Crc8(polynomial)
    head, tail = b"mission", b"control"
    assert crc.calculate(tail, crc.calculate(head)) == crc.calculate(head + tail)


@pytest.mark.parametrize("polynomial", POLYNOMIALS)
def test_appending_crc_gives_zero(polynomial):
    crc = Crc8(polynomial)
    data = bytes(range(40))
    assert crc.calculate(data + bytes([crc.calculate(data)])) == 0


def test_accepts_iterables_of_ints():
    crc = Crc8(0x07)
    assert crc.calculate([0x31, 0x32, 0x33]) == crc.calculate(b"123")


def test_every_single_byte_value_is_handled():
    crc = Crc8(0x07)
    results = {crc.calculate(bytes([value])) for value in range(256)}
    assert len(results) == 256


def test_invalid_polynomial_rejected():
    with pytest.raises(ValueError):
        Crc8(0x100)
    with pytest.raises(ValueError):
        Crc8(-1)


def test_invalid_seed_rejected():
    with pytest.raises(ValueError):
        Crc8(0x07).calculate(b"abc", 0x100)