"""Tests for coordinate sets, frame history and context rebinding."""

import numpy as np
import pytest

from typed_evolution.context import EMPTY_HISTORY, ComputeContext, CoordinateSet, History
from typed_evolution.datatypes import Byte, SNFloat, UInt, UNFloat


def test_with_coordinate_set_only_replaces_coordinates():
    history = History([np.zeros((2, 2))])
    original = ComputeContext(CoordinateSet.from_floats(0.1, 0.2, 5), history)
    moved = original.with_coordinate_set(CoordinateSet.from_floats(-0.3, 0.4, 5))

    assert moved.history is history
    assert moved.coordinate_set.x == SNFloat.new(-0.3)
    assert original.coordinate_set.x == SNFloat.new(0.1)


def test_context_is_immutable():
    context = ComputeContext(CoordinateSet.from_floats(0.0, 0.0))
    with pytest.raises(AttributeError):
        context.history = History()
    assert context.history is EMPTY_HISTORY


def test_tick_samples_wrap():
    coords = CoordinateSet.from_floats(0.0, 0.0, 300.7)
    assert coords.get_byte_t() == Byte.new(44)
    assert coords.get_uint_t() == UInt.new(300)
    assert CoordinateSet.from_floats(0.0, 0.0, float('inf')).get_byte_t() == Byte.new(0)


def test_uint_tick_saturates():
    assert CoordinateSet.from_floats(0.0, 0.0, -1.0).get_uint_t() == UInt.new(0)
    assert CoordinateSet.from_floats(0.0, 0.0, 2.0 ** 40).get_uint_t() == UInt.new(2 ** 32 - 1)
    assert CoordinateSet.from_floats(0.0, 0.0, float('inf')).get_uint_t() == UInt.new(2 ** 32 - 1)
    assert CoordinateSet.from_floats(0.0, 0.0, float('nan')).get_uint_t() == UInt.new(0)


def test_coord_shift_wraps_into_range():
    coords = CoordinateSet.from_floats(0.75, -0.75, 2.0)
    shifted = coords.get_coord_shifted(0.5, -0.5, 1.0)
    assert shifted.x.into_inner() == pytest.approx(-0.75)
    assert shifted.y.into_inner() == pytest.approx(0.75)
    assert shifted.t == 3.0


def test_history_is_read_only():
    history = History([np.ones((3, 3))])
    with pytest.raises(ValueError):
        history.frame(0)[0, 0] = 0.5


def test_history_rejects_non_2d_frames():
    with pytest.raises(ValueError):
        History([np.zeros((2, 2, 3))])


def test_history_sampling_maps_coordinates_to_pixels():
    history = History([np.array([[0.0, 1.0], [0.5, 0.25]])])
    assert history.sample(0, SNFloat.new(-1.0), SNFloat.new(-1.0)) == UNFloat.new(0.0)
    assert history.sample(0, SNFloat.new(1.0), SNFloat.new(1.0)) == UNFloat.new(0.25)
    assert history.sample(0, SNFloat.new(0.9), SNFloat.new(-0.9)) == UNFloat.new(1.0)
    assert history.sample(3, SNFloat.new(0.0), SNFloat.new(0.0)) == UNFloat.new(0.0)


def test_history_push_keeps_newest_frames():
    history = History()
    for value in range(5):
        history = history.pushed(np.full((1, 1), value / 10), limit=3)
    assert len(history) == 3
    assert history.frame(0)[0, 0] == pytest.approx(0.4)
    assert history.frame(2)[0, 0] == pytest.approx(0.2)
