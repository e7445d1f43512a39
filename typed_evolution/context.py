"""
typed_evolution/context.py - Coordinates, frame history and the compute context
"""
import math
from typing import NamedTuple, Sequence

import numpy as np

from .datatypes import Byte, SNFloat, UInt, UNFloat


class CoordinateSet:
    """Spatial position in [-1, 1]^2 plus the current tick"""

    __slots__ = ('x', 'y', 't')

    def __init__(self, x: SNFloat, y: SNFloat, t: float):
        self.x = x
        self.y = y
        self.t = t

    @classmethod
    def from_floats(cls, x: float, y: float, t: float = 0.0) -> 'CoordinateSet':
        return cls(SNFloat.new_clamped(x), SNFloat.new_clamped(y), float(t))

    def get_byte_t(self) -> Byte:
        """Per-tick byte sample; ticks wrap every 256 frames"""
        return Byte.new_circular(self._tick())

    def get_uint_t(self) -> UInt:
        """Tick as an unsigned 32-bit value, saturating at both ends"""
        if math.isnan(self.t):
            return UInt.new(0)
        return UInt.new(int(min(max(self.t, 0.0), UInt.MODULUS - 1)))

    def _tick(self) -> int:
        return int(self.t) if math.isfinite(self.t) else 0

    def get_coord_shifted(self, dx: float, dy: float, dt: float = 0.0) -> 'CoordinateSet':
        return CoordinateSet(
            SNFloat.new_circular(self.x.into_inner() + dx),
            SNFloat.new_circular(self.y.into_inner() + dy),
            self.t + dt,
        )

    def __eq__(self, other):
        return (isinstance(other, CoordinateSet)
                and self.x == other.x and self.y == other.y and self.t == other.t)

    def __hash__(self):
        return hash((self.x, self.y, self.t))

    def __repr__(self):
        return f"CoordinateSet(x={self.x.value:.3f}, y={self.y.value:.3f}, t={self.t})"


class History:
    """
    Read-only stack of previous output frames, newest first.

    Each frame is a 2-D array of values in [0, 1]. The engine only ever
    samples it; the arrays are frozen on entry so nothing downstream can
    write through them.
    """

    def __init__(self, frames: Sequence[np.ndarray] = ()):
        frozen = []
        for frame in frames:
            array = np.array(frame, dtype=np.float64)
            if array.ndim != 2:
                raise ValueError(f"History frames must be 2-D, got shape {array.shape}")
            array.setflags(write=False)
            frozen.append(array)
        self._frames = tuple(frozen)

    def __len__(self) -> int:
        return len(self._frames)

    def frame(self, frames_back: int) -> np.ndarray:
        return self._frames[frames_back]

    def sample(self, frames_back: int, x: SNFloat, y: SNFloat) -> UNFloat:
        """Sample a past frame at a normalised coordinate"""
        if not 0 <= frames_back < len(self._frames):
            return UNFloat(0.0)
        frame = self._frames[frames_back]
        height, width = frame.shape
        col = min(int((x.into_inner() + 1.0) * 0.5 * width), width - 1)
        row = min(int((y.into_inner() + 1.0) * 0.5 * height), height - 1)
        return UNFloat.new_clamped(float(frame[row, col]))

    def pushed(self, frame: np.ndarray, limit: int) -> 'History':
        """New history with `frame` on top, keeping at most `limit` frames"""
        return History((frame,) + self._frames[:max(limit - 1, 0)])


EMPTY_HISTORY = History()


class ComputeContext(NamedTuple):
    """Everything a node may read while computing"""

    coordinate_set: CoordinateSet
    history: History = EMPTY_HISTORY

    def with_coordinate_set(self, coordinate_set: CoordinateSet) -> 'ComputeContext':
        """Shallow copy with only the coordinate set replaced"""
        return self._replace(coordinate_set=coordinate_set)
