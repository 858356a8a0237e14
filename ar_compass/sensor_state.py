"""
Latest-sample store for orientation and position sensors.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .sensors import OrientationEvent, PositionFix


@dataclass(frozen=True)
class RelativeOrientation:
    """Device rotation in degrees, referenced to the device's own start pose."""
    alpha: Optional[float] = 0.0
    beta: Optional[float] = 0.0
    gamma: Optional[float] = 0.0


@dataclass(frozen=True)
class AbsoluteOrientation:
    """Device rotation in degrees; ``absolute`` is True only for a true-north reading."""
    alpha: Optional[float] = 0.0
    beta: Optional[float] = 0.0
    gamma: Optional[float] = 0.0
    absolute: bool = False


@dataclass(frozen=True)
class Position:
    """WGS84 position with a 1-sigma accuracy radius in meters."""
    lat: float = 0.0
    lon: float = 0.0
    accuracy: float = 0.0


def _or_zero(value: Optional[float]) -> float:
    return value if value is not None else 0.0


def has_position(position: Position) -> bool:
    """A fix at exactly 0,0 is indistinguishable from no fix."""
    return position.lat != 0 or position.lon != 0


def has_orientation(orientation) -> bool:
    """True when any angle differs from its zero default."""
    return orientation.alpha != 0 or orientation.beta != 0 or orientation.gamma != 0


class SensorStateStore:
    """
    Holds the most recent sample of each sensor family.

    Every record is immutable and replaced as a whole by its single writer,
    so a reader always sees a consistent record.
    """

    def __init__(self):
        self.relative = RelativeOrientation()
        self.absolute = AbsoluteOrientation()
        self.position = Position()

        # Samples received per family, for diagnostics only
        self.relative_samples = 0
        self.absolute_samples = 0
        self.position_samples = 0

    def on_relative_orientation(self, event: OrientationEvent):
        self.relative = RelativeOrientation(
            alpha=_or_zero(event.alpha),
            beta=_or_zero(event.beta),
            gamma=_or_zero(event.gamma),
        )
        self.relative_samples += 1

    def on_absolute_orientation(self, event: OrientationEvent):
        self.absolute = AbsoluteOrientation(
            alpha=_or_zero(event.alpha),
            beta=_or_zero(event.beta),
            gamma=_or_zero(event.gamma),
            absolute=bool(event.absolute),
        )
        self.absolute_samples += 1

    def on_position(self, fix: PositionFix):
        self.position = Position(
            lat=_or_zero(fix.latitude),
            lon=_or_zero(fix.longitude),
            accuracy=_or_zero(fix.accuracy),
        )
        self.position_samples += 1

    def snapshot(self) -> Tuple[RelativeOrientation, AbsoluteOrientation, Position]:
        """
        Get the current records together.

        Returns:
            Tuple of (relative, absolute, position)
        """
        return self.relative, self.absolute, self.position

    def has_position(self) -> bool:
        return has_position(self.position)

    def has_relative_orientation(self) -> bool:
        return has_orientation(self.relative)

    def has_absolute_orientation(self) -> bool:
        return has_orientation(self.absolute)
