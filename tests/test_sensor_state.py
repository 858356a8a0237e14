"""Unit tests for the sensor state store."""

from __future__ import annotations

import dataclasses

import pytest

from ar_compass.sensor_state import (AbsoluteOrientation, Position, RelativeOrientation,
                                     SensorStateStore)
from ar_compass.sensors import OrientationEvent, PositionFix


def test_defaults_are_zero() -> None:
    store = SensorStateStore()

    assert store.snapshot() == (RelativeOrientation(0, 0, 0),
                                AbsoluteOrientation(0, 0, 0, False),
                                Position(0, 0, 0))
    assert not store.has_position()
    assert not store.has_relative_orientation()
    assert not store.has_absolute_orientation()


def test_missing_angles_become_zero() -> None:
    store = SensorStateStore()

    store.on_relative_orientation(OrientationEvent(alpha=None, beta=12.0, gamma=None))
    store.on_absolute_orientation(OrientationEvent(alpha=30.0))

    assert store.relative == RelativeOrientation(0.0, 12.0, 0.0)
    assert store.absolute == AbsoluteOrientation(30.0, 0.0, 0.0, False)


def test_records_are_replaced_whole() -> None:
    store = SensorStateStore()
    store.on_relative_orientation(OrientationEvent(1.0, 2.0, 3.0))
    first = store.relative

    store.on_relative_orientation(OrientationEvent(4.0, 5.0, 6.0))

    assert first == RelativeOrientation(1.0, 2.0, 3.0)
    assert store.relative == RelativeOrientation(4.0, 5.0, 6.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        store.relative.alpha = 9.0


def test_only_latest_position_is_kept() -> None:
    store = SensorStateStore()

    store.on_position(PositionFix(47.5, 19.0, 12.0))
    store.on_position(PositionFix(47.6, 19.1, 5.0))

    assert store.position == Position(47.6, 19.1, 5.0)
    assert store.position_samples == 2
    assert store.has_position()


def test_zero_valued_sample_counts_as_no_data() -> None:
    store = SensorStateStore()

    store.on_relative_orientation(OrientationEvent(0.0, 0.0, 0.0))
    store.on_position(PositionFix(0.0, 0.0, 3.0))

    assert store.relative_samples == 1
    assert not store.has_relative_orientation()
    assert not store.has_position()


def test_absolute_flag_is_stored() -> None:
    store = SensorStateStore()

    store.on_absolute_orientation(OrientationEvent(123.0, 1.0, 2.0, absolute=True))

    assert store.absolute.absolute is True
    assert store.has_absolute_orientation()


@pytest.mark.parametrize("fix, expected", [
    (PositionFix(47.5, 19.0, None), Position(47.5, 19.0, 0.0)),
    (PositionFix(None, 19.0, 5.0), Position(0.0, 19.0, 5.0)),
    (PositionFix(None, None, None), Position(0.0, 0.0, 0.0)),
])
def test_missing_position_fields_become_zero(fix, expected) -> None:
    store = SensorStateStore()

    store.on_position(fix)

    assert store.position == expected
