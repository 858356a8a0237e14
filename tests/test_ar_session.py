"""Unit tests for the AR session lifecycle."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from ar_compass import ARSession, FrameScheduler
from ar_compass.ar_session import START_LABEL, gps_error_message
from ar_compass.sensors import (GeolocationError, GeolocationErrorCode, GeolocationSensor,
                                OrientationEvent, OrientationSensor, PositionFix)

from .conftest import FakeCamera, FakeClock


def test_start_runs_the_pipeline(session, camera, orientation, geolocation, scheduler) -> None:
    assert session.start() is True

    assert session.is_running
    assert camera.started
    assert not session.start_visible
    assert orientation.relative.listener_count == 1
    assert orientation.absolute.listener_count == 1
    assert geolocation.active_watches == 1
    assert scheduler.pending == 1


def test_start_is_idempotent(session, geolocation, scheduler) -> None:
    session.start()
    session.start()

    assert geolocation.active_watches == 1
    assert scheduler.pending == 1


def test_frames_render_latest_sensor_data(session, orientation, geolocation, scheduler) -> None:
    session.start()
    orientation.push_relative(OrientationEvent(45.0, 1.0, 2.0))
    geolocation.push_fix(PositionFix(47.5, 19.0, 10.0))

    scheduler.dispatch(16.0)

    assert "GPS: 47.50000, 19.00000 (±10m)" in session.info_text
    assert "Relative orientation: α:45.0° β:1.0° γ:2.0°" in session.info_text
    assert session.info_text.endswith("Heading: 45.0°")
    assert session.last_commands


def test_camera_failure_leaves_session_idle(orientation, geolocation, scheduler, clock) -> None:
    camera = FakeCamera(fail=True)
    session = ARSession(camera, orientation, geolocation, scheduler=scheduler, clock=clock)

    assert session.start() is False

    assert not session.is_running
    assert session.start_enabled
    assert session.start_visible
    assert session.start_label == START_LABEL
    assert session.info_text == "Error: Could not access camera 0"
    assert scheduler.pending == 0
    assert geolocation.active_watches == 0


def test_orientation_denied_aborts_startup(camera, geolocation, scheduler, clock) -> None:
    orientation = OrientationSensor(requires_permission=True, permission=OrientationSensor.DENIED)
    session = ARSession(camera, orientation, geolocation, scheduler=scheduler, clock=clock)

    assert session.start() is False

    assert not session.is_running
    assert camera.release_calls == 1
    assert orientation.relative.listener_count == 0
    assert session.info_text == "Error: Orientation permission denied"
    assert scheduler.dispatch(16.0) == 0


def test_orientation_granted_starts(camera, geolocation, scheduler, clock) -> None:
    orientation = OrientationSensor(requires_permission=True)
    session = ARSession(camera, orientation, geolocation, scheduler=scheduler, clock=clock)

    assert session.start() is True


def test_restart_after_failure(orientation, geolocation, scheduler, clock) -> None:
    camera = FakeCamera(fail=True)
    session = ARSession(camera, orientation, geolocation, scheduler=scheduler, clock=clock)
    session.start()

    camera.fail = False

    assert session.start() is True
    assert session.is_running


def test_stop_releases_everything(session, camera, orientation, geolocation, scheduler) -> None:
    session.start()
    scheduler.dispatch(16.0)
    commands = session.last_commands
    info = session.info_text

    session.stop()
    session.stop()
    orientation.push_relative(OrientationEvent(90.0, 0.0, 0.0))
    scheduler.dispatch(33.0)

    assert not session.is_running
    assert not camera.started
    assert orientation.relative.listener_count == 0
    assert orientation.absolute.listener_count == 0
    assert geolocation.active_watches == 0
    assert session.last_commands == commands
    assert session.info_text == info
    assert session.store.relative_samples == 0


def test_unsupported_geolocation_is_not_fatal(camera, orientation, scheduler, clock) -> None:
    session = ARSession(camera, orientation, GeolocationSensor(supported=False),
                        scheduler=scheduler, clock=clock)

    assert session.start() is True
    assert session.info_text == "Geolocation is not supported."

    scheduler.dispatch(16.0)
    assert session.info_text.startswith("GPS: Waiting...")


def test_gps_errors_keep_the_session_running(session, geolocation, scheduler) -> None:
    session.start()

    geolocation.push_error(GeolocationError(GeolocationErrorCode.PERMISSION_DENIED))
    assert session.info_text == "GPS permission denied"

    scheduler.dispatch(16.0)
    assert session.is_running
    assert session.info_text.splitlines()[-1] == "GPS permission denied"

    geolocation.push_fix(PositionFix(47.5, 19.0, 10.0))
    scheduler.dispatch(33.0)
    assert "GPS permission denied" not in session.info_text
    assert geolocation.active_watches == 1


def test_gps_error_messages() -> None:
    assert gps_error_message(GeolocationError(GeolocationErrorCode.POSITION_UNAVAILABLE)) == \
        "GPS position unavailable"
    assert gps_error_message(GeolocationError(GeolocationErrorCode.TIMEOUT)) == "GPS timeout"
    assert gps_error_message(GeolocationError(GeolocationErrorCode.UNKNOWN, "boom")) == \
        "Unknown GPS error: boom"


def test_silent_sensors_warn_once(session, scheduler, clock, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="ar_compass")
    session.start()

    scheduler.dispatch(500.0)
    assert not caplog.records

    scheduler.dispatch(1000.0)
    scheduler.dispatch(2000.0)
    scheduler.dispatch(3000.0)

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["Relative orientation data is not arriving",
                        "Absolute orientation data is not arriving"]
    assert session.is_running
    assert session.info_text.endswith("Heading: 0.0°")


def test_absence_check_quiet_when_data_arrives(session, orientation, scheduler) -> None:
    session.start()
    orientation.push_relative(OrientationEvent(10.0, 0.0, 0.0))
    orientation.push_absolute(OrientationEvent(200.0, 0.0, 0.0, absolute=True))

    assert session.check_sensor_absence() == []


def test_compose_draws_over_the_camera_frame(session, camera, scheduler) -> None:
    session.start()
    scheduler.dispatch(16.0)
    frame = camera.read()

    composed = session.compose(frame)

    assert composed.shape == frame.shape
    assert composed.sum() > 0
    assert frame.sum() == 0
    assert np.array_equal(session.compose(frame, show_status_text=False),
                          session.compose(frame, show_status_text=False))


def test_scheduler_clock_drives_animation() -> None:
    clock = FakeClock(start=0.0)
    scheduler = FrameScheduler()
    session = ARSession(FakeCamera(), OrientationSensor(), GeolocationSensor(),
                        scheduler=scheduler, clock=clock)
    session.start()

    scheduler.dispatch(250.0)
    first = next(c for c in session.last_commands if c.op == "stroke_rect")
    scheduler.dispatch(1250.0)
    second = next(c for c in session.last_commands if c.op == "stroke_rect")

    assert first.args[2] == pytest.approx(second.args[2])


@pytest.mark.parametrize("fix", [PositionFix(None, 19.0, 5.0), PositionFix(47.5, 19.0, None)])
def test_partial_fix_keeps_the_loop_rendering(session, geolocation, scheduler, fix) -> None:
    session.start()
    geolocation.push_fix(fix)

    scheduler.dispatch(16.0)
    scheduler.dispatch(33.0)

    assert session.is_running
    assert session.loop.frame_count == 2
    assert session.info_text.startswith("GPS: ")


def test_gps_error_does_not_survive_a_restart(session, geolocation, scheduler) -> None:
    session.start()
    geolocation.push_error(GeolocationError(GeolocationErrorCode.TIMEOUT))
    session.stop()

    session.start()
    scheduler.dispatch(16.0)

    assert session.gps_error is None
    assert "GPS timeout" not in session.info_text


def test_zero_samples_are_reported_apart_from_missing_ones(session, orientation, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="ar_compass")
    session.start()
    orientation.push_relative(OrientationEvent(0.0, 0.0, 0.0))
    orientation.push_relative(OrientationEvent(0.0, 0.0, 0.0))

    assert session.check_sensor_absence() == ["relative", "absolute"]

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["Relative orientation reads all zero after 2 samples",
                        "Absolute orientation data is not arriving"]
