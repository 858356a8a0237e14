"""
AR session: starts and stops the camera, the sensors and the render loop.
"""

import logging
import time
from typing import Callable, List, Optional

import cv2
import numpy as np

from .camera import CameraSource
from .canvas import Canvas, DrawCommand
from .errors import AcquisitionError, OrientationPermissionError
from .overlay import draw_status_text, rasterize
from .render_loop import FrameScheduler, RenderLoop
from .renderer import FrameRenderer
from .sensor_state import SensorStateStore
from .sensors import (GeolocationError, GeolocationErrorCode, GeolocationOptions,
                      GeolocationSensor, KeyboardOrientationSensor, OrientationSensor)

logger = logging.getLogger(__name__)

START_LABEL = "Start AR"
STARTING_LABEL = "Starting..."

GPS_ERROR_MESSAGES = {
    GeolocationErrorCode.PERMISSION_DENIED: "GPS permission denied",
    GeolocationErrorCode.POSITION_UNAVAILABLE: "GPS position unavailable",
    GeolocationErrorCode.TIMEOUT: "GPS timeout",
}


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def gps_error_message(error: GeolocationError) -> str:
    """Map a geolocation error to the text shown to the user."""
    message = GPS_ERROR_MESSAGES.get(error.code)
    if message is None:
        message = f"Unknown GPS error: {error.message}"
    return message


class ARSession:
    """Lifecycle controller tying sensors, renderer and render loop together."""

    def __init__(self,
                 camera: CameraSource,
                 orientation: OrientationSensor,
                 geolocation: GeolocationSensor,
                 renderer: Optional[FrameRenderer] = None,
                 canvas: Optional[Canvas] = None,
                 scheduler: Optional[FrameScheduler] = None,
                 clock: Callable[[], float] = monotonic_ms,
                 gps_options: Optional[GeolocationOptions] = None,
                 absence_check_delay_ms: float = 1000):
        """
        Initialize the AR session.

        Args:
            camera: Camera acquisition collaborator
            orientation: Relative and absolute orientation sources
            geolocation: Geolocation watch collaborator
            renderer: Frame renderer, defaults to FrameRenderer()
            canvas: Drawing surface, resized to the camera frame when composing
            scheduler: Display-refresh scheduler driving the render loop
            clock: Monotonic clock in milliseconds
            gps_options: Options for the geolocation watch
            absence_check_delay_ms: Delay before warning about silent orientation sensors
        """
        self.camera = camera
        self.orientation = orientation
        self.geolocation = geolocation
        self.renderer = renderer or FrameRenderer()
        self.canvas = canvas or Canvas(camera.frame_width, camera.frame_height)
        self.scheduler = scheduler or FrameScheduler()
        self.clock = clock
        self.gps_options = gps_options or GeolocationOptions()
        self.absence_check_delay_ms = absence_check_delay_ms

        self.store = SensorStateStore()
        self.loop = RenderLoop(self.scheduler, self._render)

        # Start control and status line, as seen by the user
        self.start_enabled = True
        self.start_visible = True
        self.start_label = START_LABEL
        self.info_text = ""

        self.last_commands: List[DrawCommand] = []
        self.gps_error: Optional[str] = None
        self._gps_watch_id: Optional[int] = None
        self._listeners_attached = False
        self._absence_check_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self.loop.is_running

    def start(self) -> bool:
        """
        Acquire the camera and orientation sensors, then start rendering.

        Returns:
            True if the session is running
        """
        if self.is_running:
            logger.warning("AR session already running")
            return True

        self.start_enabled = False
        self.start_label = STARTING_LABEL

        try:
            self.camera.start()
            self._start_orientation()
        except AcquisitionError as e:
            logger.error(f"Startup failed: {e}")
            self._release_sensors()
            self.start_enabled = True
            self.start_label = START_LABEL
            self.info_text = f"Error: {e}"
            return False

        self._start_gps()

        self.start_visible = False
        self.loop.start()
        logger.info("AR session started")
        return True

    def stop(self):
        """Stop rendering and release every sensor; safe to call repeatedly."""
        was_running = self.is_running
        self.loop.stop()
        self._release_sensors()
        if was_running:
            logger.info(f"AR session stopped (samples: relative={self.store.relative_samples} "
                        f"absolute={self.store.absolute_samples} "
                        f"position={self.store.position_samples})")

    def _start_orientation(self):
        if self.orientation.requires_permission:
            permission = self.orientation.request_permission()
            if permission != OrientationSensor.GRANTED:
                raise OrientationPermissionError("Orientation permission denied")

        self.orientation.relative.add_listener(self.store.on_relative_orientation)
        self.orientation.absolute.add_listener(self.store.on_absolute_orientation)
        self._listeners_attached = True
        self._absence_check_at = self.clock() + self.absence_check_delay_ms

    def _start_gps(self):
        if not self.geolocation.supported:
            logger.error("Geolocation not supported")
            self.info_text = "Geolocation is not supported."
            return

        self._gps_watch_id = self.geolocation.watch_position(
            self._on_position, self._on_gps_error, self.gps_options)

    def _release_sensors(self):
        self.camera.release()

        if self._listeners_attached:
            self.orientation.relative.remove_listener(self.store.on_relative_orientation)
            self.orientation.absolute.remove_listener(self.store.on_absolute_orientation)
            self._listeners_attached = False
        self._absence_check_at = None

        if self._gps_watch_id is not None:
            self.geolocation.clear_watch(self._gps_watch_id)
            self._gps_watch_id = None
        self.gps_error = None

    def _on_position(self, fix):
        self.store.on_position(fix)
        self.gps_error = None

    def _on_gps_error(self, error: GeolocationError):
        logger.error(f"GPS error: {error.code.name} {error.message}")
        self.gps_error = gps_error_message(error)
        self.info_text = self.gps_error

    def check_sensor_absence(self) -> List[str]:
        """
        Warn once about orientation streams that have not delivered data.

        Returns:
            Names of the silent streams
        """
        self._absence_check_at = None
        silent = []
        streams = (
            ("relative", "Relative", self.store.relative_samples,
             self.store.has_relative_orientation()),
            ("absolute", "Absolute", self.store.absolute_samples,
             self.store.has_absolute_orientation()),
        )
        for name, label, samples, has_data in streams:
            if has_data:
                continue
            silent.append(name)
            if samples == 0:
                logger.warning(f"{label} orientation data is not arriving")
            else:
                # Indistinguishable from no data on screen
                logger.warning(f"{label} orientation reads all zero after {samples} samples")
        return silent

    def _render(self, now_ms: float):
        if self._absence_check_at is not None and now_ms >= self._absence_check_at:
            self.check_sensor_absence()

        relative, absolute, position = self.store.snapshot()
        commands, status = self.renderer.render_frame(
            self.canvas, relative, absolute, position, now_ms)

        self.last_commands = commands
        if self.gps_error:
            status = f"{status}\n{self.gps_error}"
        self.info_text = status

    def compose(self, frame: np.ndarray, show_status_text: bool = True, **text_options) -> np.ndarray:
        """
        Draw the latest overlay and status text over a camera frame.

        Args:
            frame: BGR camera frame
            show_status_text: Whether to draw the status block
            **text_options: Passed to draw_status_text

        Returns:
            Composited frame
        """
        composed = rasterize(self.last_commands, frame)
        if show_status_text and self.info_text:
            composed = draw_status_text(composed, self.info_text, **text_options)
        return composed

    def run_realtime(self, window_name: str = "AR Compass",
                     show_status_text: bool = True, **text_options) -> bool:
        """
        Run the session in an OpenCV window until 'q' is pressed.

        Args:
            window_name: Name of the display window
            show_status_text: Whether to draw the status block
            **text_options: Passed to draw_status_text

        Returns:
            False if the session could not be started
        """
        if not self.start():
            print(self.info_text)
            return False

        try:
            while self.is_running:
                frame = self.camera.read()
                if frame is None:
                    logger.error("Camera stopped delivering frames")
                    break

                height, width = frame.shape[:2]
                if (width, height) != (self.canvas.width, self.canvas.height):
                    self.canvas.resize(width, height)

                self.scheduler.dispatch(self.clock())
                cv2.imshow(window_name, self.compose(frame, show_status_text, **text_options))

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                if isinstance(self.orientation, KeyboardOrientationSensor):
                    self.orientation.handle_key(key)

        except KeyboardInterrupt:
            print("Interrupted by user")
        finally:
            self.stop()
            cv2.destroyAllWindows()

        return True
