"""
typed_evolution/datatypes.py - Primitive value types with circular arithmetic
"""
import math
import random
from typing import Any


def _require_int(value: Any, type_name: str) -> int:
    """Reject floats, strings and bools posing as integers"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{type_name} requires an integer, got {value!r}")
    return value


class Boolean:
    """A single bit"""

    __slots__ = ('value',)

    def __init__(self, value: bool):
        self.value = bool(value)

    @classmethod
    def new(cls, value: bool) -> 'Boolean':
        if not isinstance(value, bool):
            raise ValueError(f"Boolean requires a bool, got {value!r}")
        return cls(value)

    @classmethod
    def new_unchecked(cls, value: bool) -> 'Boolean':
        return cls(value)

    def into_inner(self) -> bool:
        return self.value

    @classmethod
    def random(cls, rng: random.Random) -> 'Boolean':
        return cls(rng.random() < 0.5)

    def to_json(self) -> bool:
        return self.value

    @classmethod
    def from_json(cls, raw: Any) -> 'Boolean':
        return cls.new(raw)

    def __eq__(self, other):
        return isinstance(other, Boolean) and self.value == other.value

    def __hash__(self):
        return hash(('Boolean', self.value))

    def __repr__(self):
        return f"Boolean({self.value})"


class ModularInt:
    """
    Base for fixed-width integers with wraparound arithmetic.

    Subclasses set LOW and MODULUS; the representable range is
    [LOW, LOW + MODULUS). Division and modulus by zero yield the zero
    divisor instead of failing.
    """

    __slots__ = ('value',)

    LOW = 0
    MODULUS = 1

    def __init__(self, value: int):
        self.value = value

    @classmethod
    def _wrap(cls, value: int) -> int:
        return (value - cls.LOW) % cls.MODULUS + cls.LOW

    @classmethod
    def new(cls, value: int) -> 'ModularInt':
        """Checked construction; out-of-range input is a caller fault"""
        value = _require_int(value, cls.__name__)
        if not cls.LOW <= value < cls.LOW + cls.MODULUS:
            raise ValueError(
                f"{cls.__name__} value {value} outside "
                f"[{cls.LOW}, {cls.LOW + cls.MODULUS})")
        return cls(value)

    @classmethod
    def new_circular(cls, value: int) -> 'ModularInt':
        return cls(cls._wrap(_require_int(value, cls.__name__)))

    @classmethod
    def new_unchecked(cls, value: int) -> 'ModularInt':
        return cls(value)

    def into_inner(self) -> int:
        return self.value

    def circular_add(self, other: 'ModularInt') -> 'ModularInt':
        return type(self)(self._wrap(self.value + other.value))

    def circular_multiply(self, other: 'ModularInt') -> 'ModularInt':
        return type(self)(self._wrap(self.value * other.value))

    def divide(self, other: 'ModularInt') -> 'ModularInt':
        if other.value == 0:
            return other
        return type(self)(self._wrap(self.value // other.value))

    def modulus(self, other: 'ModularInt') -> 'ModularInt':
        if other.value == 0:
            return other
        return type(self)(self._wrap(self.value % other.value))

    @classmethod
    def random(cls, rng: random.Random) -> 'ModularInt':
        return cls(cls.LOW + rng.randrange(cls.MODULUS))

    def to_json(self) -> int:
        return self.value

    @classmethod
    def from_json(cls, raw: Any) -> 'ModularInt':
        return cls.new(raw)

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __repr__(self):
        return f"{type(self).__name__}({self.value})"


class Nibble(ModularInt):
    """Integer in [0, 16)"""

    __slots__ = ()
    MODULUS = 16


class Byte(ModularInt):
    """Integer in [0, 256)"""

    __slots__ = ()
    MODULUS = 256

    def invert_wrapped(self) -> 'Byte':
        return Byte(255 - self.value)


class UInt(ModularInt):
    """Unsigned 32-bit integer"""

    __slots__ = ()
    MODULUS = 2 ** 32


class SInt(ModularInt):
    """Signed 32-bit two's-complement integer"""

    __slots__ = ()
    LOW = -2 ** 31
    MODULUS = 2 ** 32

    # Machine semantics: quotient truncates toward zero, remainder follows the dividend
    def divide(self, other: 'SInt') -> 'SInt':
        if other.value == 0:
            return other
        quotient = abs(self.value) // abs(other.value)
        if (self.value < 0) != (other.value < 0):
            quotient = -quotient
        return SInt(self._wrap(quotient))

    def modulus(self, other: 'SInt') -> 'SInt':
        if other.value == 0:
            return other
        remainder = abs(self.value) % abs(other.value)
        if self.value < 0:
            remainder = -remainder
        return SInt(self._wrap(remainder))


class _BoundedFloat:
    """Base for floats living in a closed interval [LOW, HIGH]"""

    __slots__ = ('value',)

    LOW = 0.0
    HIGH = 1.0

    def __init__(self, value: float):
        self.value = value

    @classmethod
    def new(cls, value: float) -> '_BoundedFloat':
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{cls.__name__} requires a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value) or not cls.LOW <= value <= cls.HIGH:
            raise ValueError(f"{cls.__name__} value {value} outside [{cls.LOW}, {cls.HIGH}]")
        return cls(value)

    @classmethod
    def new_clamped(cls, value: float) -> '_BoundedFloat':
        if not math.isfinite(value):
            return cls(cls.LOW)
        return cls(min(max(float(value), cls.LOW), cls.HIGH))

    @classmethod
    def new_circular(cls, value: float) -> '_BoundedFloat':
        if not math.isfinite(value):
            return cls(cls.LOW)
        span = cls.HIGH - cls.LOW
        return cls((float(value) - cls.LOW) % span + cls.LOW)

    @classmethod
    def new_unchecked(cls, value: float) -> '_BoundedFloat':
        return cls(value)

    def into_inner(self) -> float:
        return self.value

    @classmethod
    def random(cls, rng: random.Random) -> '_BoundedFloat':
        return cls(rng.uniform(cls.LOW, cls.HIGH))

    def to_json(self) -> float:
        return self.value

    @classmethod
    def from_json(cls, raw: Any) -> '_BoundedFloat':
        return cls.new(raw)

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __repr__(self):
        return f"{type(self).__name__}({self.value:.4f})"


class UNFloat(_BoundedFloat):
    """Unsigned normalised float in [0, 1]"""

    __slots__ = ()

    def to_signed(self) -> 'SNFloat':
        return SNFloat.new_clamped(self.value * 2.0 - 1.0)


class SNFloat(_BoundedFloat):
    """Signed normalised float in [-1, 1]"""

    __slots__ = ()
    LOW = -1.0

    def to_unsigned(self) -> UNFloat:
        return UNFloat.new_clamped((self.value + 1.0) * 0.5)


class BitColor:
    """Three-bit RGB color: bit 0 red, bit 1 green, bit 2 blue"""

    __slots__ = ('value',)

    NAMES = ['black', 'red', 'green', 'yellow', 'blue', 'magenta', 'cyan', 'white']

    def __init__(self, value: int):
        self.value = value

    @classmethod
    def new(cls, value: int) -> 'BitColor':
        value = _require_int(value, 'BitColor')
        if not 0 <= value < 8:
            raise ValueError(f"BitColor value {value} outside [0, 8)")
        return cls(value)

    @classmethod
    def new_unchecked(cls, value: int) -> 'BitColor':
        return cls(value)

    @classmethod
    def from_components(cls, red: bool, green: bool, blue: bool) -> 'BitColor':
        return cls(int(red) | int(green) << 1 | int(blue) << 2)

    def into_inner(self) -> int:
        return self.value

    def has_color(self, other: 'BitColor') -> bool:
        """True when every channel lit in `other` is also lit here"""
        return self.value & other.value == other.value

    def to_rgb(self):
        return tuple(255 if self.value & bit else 0 for bit in (1, 2, 4))

    @classmethod
    def random(cls, rng: random.Random) -> 'BitColor':
        return cls(rng.randrange(8))

    def to_json(self) -> int:
        return self.value

    @classmethod
    def from_json(cls, raw: Any) -> 'BitColor':
        return cls.new(raw)

    def __eq__(self, other):
        return isinstance(other, BitColor) and self.value == other.value

    def __hash__(self):
        return hash(('BitColor', self.value))

    def __repr__(self):
        return f"BitColor({self.NAMES[self.value]})"
