"""
Sensor collaborators feeding orientation and position samples into the session.

On a phone these would be the platform's orientation and geolocation APIs.
Here they are small event sources that a host (or a test) pushes samples into.
"""

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrientationEvent:
    """A raw orientation sample. Any angle may be missing on some platforms."""
    alpha: Optional[float] = None
    beta: Optional[float] = None
    gamma: Optional[float] = None
    absolute: Optional[bool] = None


@dataclass(frozen=True)
class PositionFix:
    """A single geolocation fix in WGS84 degrees, accuracy in meters."""
    latitude: Optional[float]
    longitude: Optional[float]
    accuracy: Optional[float]
    timestamp_ms: float = 0.0


class GeolocationErrorCode(Enum):
    """Error codes delivered by the geolocation watch."""
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
    UNKNOWN = 0


@dataclass(frozen=True)
class GeolocationError:
    code: GeolocationErrorCode
    message: str = ""


@dataclass(frozen=True)
class GeolocationOptions:
    """Watch options: bounded wait for a fix and how stale a cached fix may be."""
    enable_high_accuracy: bool = True
    timeout_ms: int = 10000
    maximum_age_ms: int = 60000


class EventSource:
    """Minimal listener registry for one kind of event."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable] = []

    def add_listener(self, listener: Callable):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event) -> int:
        """
        Deliver an event to every listener in registration order.

        Args:
            event: Event object handed to each listener

        Returns:
            Number of listeners that received the event
        """
        listeners = list(self._listeners)
        for listener in listeners:
            listener(event)
        return len(listeners)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class OrientationSensor:
    """
    Relative and absolute orientation event sources.

    Platforms that require explicit consent set ``requires_permission``;
    ``request_permission`` then returns the user's decision.
    """

    GRANTED = "granted"
    DENIED = "denied"

    def __init__(self, requires_permission: bool = False, permission: str = GRANTED):
        """
        Initialize the orientation sensor.

        Args:
            requires_permission: Whether the platform asks the user before delivering events
            permission: Decision returned by request_permission
        """
        self.relative = EventSource("deviceorientation")
        self.absolute = EventSource("deviceorientationabsolute")
        self.requires_permission = requires_permission
        self.permission = permission

    def request_permission(self) -> str:
        logger.info(f"Orientation permission requested: {self.permission}")
        return self.permission

    def push_relative(self, event: OrientationEvent) -> int:
        return self.relative.emit(event)

    def push_absolute(self, event: OrientationEvent) -> int:
        return self.absolute.emit(event)


class KeyboardOrientationSensor(OrientationSensor):
    """
    Orientation sensor driven by key presses, for desktops without a gyroscope.

    'a' / 'd' rotate the device alpha, 'w' / 's' tilt beta, 'n' toggles
    whether the absolute stream claims a true-north reference.
    """

    def __init__(self, step_degrees: float = 5.0):
        super().__init__()
        self.step_degrees = step_degrees
        self.alpha = 0.0
        self.beta = 0.0
        self.gamma = 0.0
        self.north_referenced = False

    def handle_key(self, key: int) -> bool:
        """
        Update the simulated pose from an OpenCV key code and emit both events.

        Args:
            key: Key code as returned by cv2.waitKey() & 0xFF

        Returns:
            True if the key changed the pose
        """
        if key == ord('a'):
            self.alpha = (self.alpha - self.step_degrees) % 360
        elif key == ord('d'):
            self.alpha = (self.alpha + self.step_degrees) % 360
        elif key == ord('w'):
            self.beta = min(self.beta + self.step_degrees, 180.0)
        elif key == ord('s'):
            self.beta = max(self.beta - self.step_degrees, -180.0)
        elif key == ord('n'):
            self.north_referenced = not self.north_referenced
        else:
            return False

        self.push_relative(OrientationEvent(self.alpha, self.beta, self.gamma))
        self.push_absolute(OrientationEvent(self.alpha, self.beta, self.gamma,
                                            absolute=self.north_referenced))
        return True


class GeolocationSensor:
    """Geolocation watch registry; hosts push fixes and errors into it."""

    def __init__(self, supported: bool = True):
        self.supported = supported
        self._watches: Dict[int, tuple] = {}
        self._ids = itertools.count(1)

    def watch_position(self,
                       on_fix: Callable[[PositionFix], None],
                       on_error: Callable[[GeolocationError], None],
                       options: Optional[GeolocationOptions] = None) -> int:
        """
        Register a continuous watch.

        Args:
            on_fix: Called with every new fix
            on_error: Called with every runtime error
            options: Accuracy, timeout and staleness settings for the watch

        Returns:
            Watch id to pass to clear_watch
        """
        watch_id = next(self._ids)
        self._watches[watch_id] = (on_fix, on_error, options or GeolocationOptions())
        logger.info(f"Geolocation watch {watch_id} started")
        return watch_id

    def clear_watch(self, watch_id: int):
        if self._watches.pop(watch_id, None) is not None:
            logger.info(f"Geolocation watch {watch_id} cleared")

    def options_for(self, watch_id: int) -> Optional[GeolocationOptions]:
        watch = self._watches.get(watch_id)
        return watch[2] if watch else None

    @property
    def active_watches(self) -> int:
        return len(self._watches)

    def push_fix(self, fix: PositionFix):
        for on_fix, _, _ in list(self._watches.values()):
            on_fix(fix)

    def push_error(self, error: GeolocationError):
        for _, on_error, _ in list(self._watches.values()):
            on_error(error)
