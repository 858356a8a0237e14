"""Shared fakes for the AR compass tests."""

from __future__ import annotations

import numpy as np
import pytest

from ar_compass import ARSession, FrameScheduler
from ar_compass.errors import CameraError
from ar_compass.sensors import GeolocationSensor, OrientationSensor


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, delta: float) -> None:
        self.value += delta


class FakeCamera:
    def __init__(self, fail: bool = False, width: int = 320, height: int = 240) -> None:
        self.fail = fail
        self.frame_width = width
        self.frame_height = height
        self.started = False
        self.release_calls = 0

    def start(self) -> None:
        if self.fail:
            raise CameraError("Could not access camera 0")
        self.started = True

    def read(self):
        if not self.started:
            return None
        return np.zeros((self.frame_height, self.frame_width, 3), dtype=np.uint8)

    def release(self) -> None:
        self.started = False
        self.release_calls += 1


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture()
def orientation() -> OrientationSensor:
    return OrientationSensor()


@pytest.fixture()
def geolocation() -> GeolocationSensor:
    return GeolocationSensor()


@pytest.fixture()
def scheduler() -> FrameScheduler:
    return FrameScheduler()


@pytest.fixture()
def session(camera, orientation, geolocation, scheduler, clock) -> ARSession:
    return ARSession(camera, orientation, geolocation, scheduler=scheduler, clock=clock)
