"""Tests for the primitive value types and their circular arithmetic."""

import random

import pytest

from typed_evolution.datatypes import BitColor, Boolean, Byte, Nibble, SInt, SNFloat, UInt, UNFloat

MODULAR_TYPES = [Nibble, Byte, UInt, SInt]


def test_nibble_add_wraps_for_every_pair():
    for a in range(16):
        for b in range(16):
            result = Nibble.new(a).circular_add(Nibble.new(b))
            assert result.into_inner() == (a + b) % 16


def test_nibble_multiply_wraps():
    assert Nibble.new(15).circular_multiply(Nibble.new(15)) == Nibble.new(225 % 16)


@pytest.mark.parametrize("cls", MODULAR_TYPES)
def test_zero_divisor_yields_zero(cls):
    rng = random.Random(3)
    zero = cls.new(0)
    for _ in range(50):
        value = cls.random(rng)
        assert value.divide(zero) == zero
        assert value.modulus(zero) == zero


def test_nibble_circular_and_checked_construction():
    assert Nibble.new_circular(20) == Nibble.new(4)
    with pytest.raises(ValueError):
        Nibble.new(16)
    with pytest.raises(ValueError):
        Nibble.new(-1)
    with pytest.raises(ValueError):
        Nibble.new(3.0)


@pytest.mark.parametrize("cls, raw", [
    (Nibble, 16), (Byte, 300), (UInt, -1), (SInt, 2 ** 31),
    (UNFloat, 1.5), (SNFloat, -2.0), (BitColor, 8),
])
def test_new_unchecked_skips_the_range_check(cls, raw):
    with pytest.raises(ValueError):
        cls.new(raw)
    assert cls.new_unchecked(raw).into_inner() == raw


def test_boolean_new_unchecked_matches_new():
    assert Boolean.new_unchecked(True) == Boolean.new(True)
    assert not Boolean.new_unchecked(False).into_inner()


def test_byte_wraps_silently():
    assert Byte.new(200).circular_add(Byte.new(100)) == Byte.new(44)
    assert Byte.new(16).circular_multiply(Byte.new(16)) == Byte.new(0)
    assert Byte.new(10).invert_wrapped() == Byte.new(245)
    assert Byte.new_circular(-1) == Byte.new(255)
    with pytest.raises(ValueError):
        Byte.new(256)


def test_uint_wraps_at_32_bits():
    top = UInt.new(2 ** 32 - 1)
    assert top.circular_add(UInt.new(1)) == UInt.new(0)
    assert UInt.new(2 ** 16).circular_multiply(UInt.new(2 ** 16)) == UInt.new(0)
    assert UInt.new(17).divide(UInt.new(5)) == UInt.new(3)
    assert UInt.new(17).modulus(UInt.new(5)) == UInt.new(2)


def test_sint_wraps_and_truncates_toward_zero():
    assert SInt.new(2 ** 31 - 1).circular_add(SInt.new(1)) == SInt.new(-2 ** 31)
    assert SInt.new(-7).divide(SInt.new(2)) == SInt.new(-3)
    assert SInt.new(7).divide(SInt.new(-2)) == SInt.new(-3)
    assert SInt.new(-7).modulus(SInt.new(2)) == SInt.new(-1)
    assert SInt.new(7).modulus(SInt.new(-2)) == SInt.new(1)
    # The one overflowing quotient wraps like the machine does
    assert SInt.new(-2 ** 31).divide(SInt.new(-1)) == SInt.new(-2 ** 31)
    with pytest.raises(ValueError):
        SInt.new(2 ** 31)


@pytest.mark.parametrize("cls", MODULAR_TYPES)
def test_random_stays_in_domain(cls):
    rng = random.Random(11)
    for _ in range(200):
        value = cls.random(rng).into_inner()
        assert cls.LOW <= value < cls.LOW + cls.MODULUS


def test_from_json_is_checked():
    assert Byte.from_json(12) == Byte.new(12)
    with pytest.raises(ValueError):
        Byte.from_json(300)
    with pytest.raises(ValueError):
        Boolean.from_json(1)
    with pytest.raises(ValueError):
        UNFloat.from_json(1.5)
    with pytest.raises(ValueError):
        BitColor.from_json(8)


def test_types_compare_by_value_and_kind():
    assert Byte.new(3) == Byte.new(3)
    assert Byte.new(3) != Nibble.new(3)
    assert len({Nibble.new(1), Nibble.new_circular(17)}) == 1


def test_bounded_floats():
    assert SNFloat.new_clamped(3.0) == SNFloat.new(1.0)
    assert SNFloat.new_circular(1.5).into_inner() == pytest.approx(-0.5)
    assert UNFloat.new_clamped(float('nan')) == UNFloat.new(0.0)
    assert SNFloat.new(-1.0).to_unsigned() == UNFloat.new(0.0)
    assert UNFloat.new(1.0).to_signed() == SNFloat.new(1.0)


def test_bit_color_has_color():
    white = BitColor.from_components(True, True, True)
    red = BitColor.from_components(True, False, False)
    cyan = BitColor.from_components(False, True, True)
    assert white.has_color(red)
    assert not red.has_color(white)
    assert not cyan.has_color(red)
    assert red.to_rgb() == (255, 0, 0)
