"""
Frame renderer for the AR overlay: breathing marker, compass widget and status text.
"""

import math
from typing import List, Optional, Tuple

from .canvas import Canvas, DrawCommand
from .heading import is_defined_angle, resolve_heading
from .sensor_state import (AbsoluteOrientation, Position, RelativeOrientation,
                           has_orientation, has_position)

MARKER_COLOR = "rgba(0,255,0,0.8)"
CROSSHAIR_COLOR = "rgba(255,255,255,0.6)"
COMPASS_OUTLINE_COLOR = "rgba(255,255,255,0.8)"
NORTH_COLOR = "rgba(255,0,0,0.9)"
ARROW_COLOR = "rgba(0,255,0,0.9)"

WAITING = "Waiting..."
UNAVAILABLE = "Unavailable"


class FrameRenderer:
    """Draws one overlay frame from the current sensor records."""

    def __init__(self,
                 base_size: float = 50,
                 amplitude: float = 20,
                 half_period_ms: float = 500,
                 marker_line_width: float = 4,
                 crosshair_half_length: float = 10,
                 compass_margin: float = 80,
                 compass_radius: float = 40):
        """
        Initialize the renderer.

        Args:
            base_size: Mean side length of the central marker in pixels
            amplitude: How far the marker size swings around base_size
            half_period_ms: Half of the breathing period in milliseconds
            marker_line_width: Outline width of the marker
            crosshair_half_length: Half length of the crosshair arms
            compass_margin: Distance of the compass centre from the right and top edges
            compass_radius: Radius of the compass circle
        """
        self.base_size = base_size
        self.amplitude = amplitude
        self.half_period_ms = half_period_ms
        self.marker_line_width = marker_line_width
        self.crosshair_half_length = crosshair_half_length
        self.compass_margin = compass_margin
        self.compass_radius = compass_radius

    @property
    def period_ms(self) -> float:
        return 2 * self.half_period_ms

    def marker_size(self, now_ms: float) -> float:
        """Marker side length; driven by the clock, not by the frame count."""
        return self.base_size + self.amplitude * math.sin(math.pi * now_ms / self.half_period_ms)

    def render_frame(self,
                     canvas: Canvas,
                     relative: RelativeOrientation,
                     absolute: AbsoluteOrientation,
                     position: Position,
                     now_ms: float) -> Tuple[List[DrawCommand], str]:
        """
        Draw a complete frame.

        Args:
            canvas: Drawing surface, fully cleared first
            relative: Relative orientation record
            absolute: Absolute orientation record
            position: Latest position record
            now_ms: Monotonic clock reading in milliseconds

        Returns:
            Tuple of (draw commands, status text)
        """
        canvas.reset()
        canvas.clear_rect(0, 0, canvas.width, canvas.height)

        self._draw_marker(canvas, relative, now_ms)

        heading = resolve_heading(relative, absolute)
        self.draw_compass(canvas,
                          canvas.width - self.compass_margin,
                          self.compass_margin,
                          self.compass_radius,
                          heading)

        return canvas.commands, self.format_status(relative, absolute, position, heading)

    def _draw_marker(self, canvas: Canvas, relative: RelativeOrientation, now_ms: float):
        size = self.marker_size(now_ms)
        # Follows raw device rotation, even when the heading falls back
        alpha = relative.alpha if is_defined_angle(relative.alpha) else 0

        canvas.save()
        canvas.translate(canvas.width / 2, canvas.height / 2)
        canvas.rotate(math.radians(alpha))
        canvas.set_style(stroke=MARKER_COLOR, line_width=self.marker_line_width)
        canvas.stroke_rect(-size / 2, -size / 2, size, size)

        # Crosshair
        arm = self.crosshair_half_length
        canvas.set_style(stroke=CROSSHAIR_COLOR, line_width=2)
        canvas.begin_path()
        canvas.move_to(-arm, 0)
        canvas.line_to(arm, 0)
        canvas.move_to(0, -arm)
        canvas.line_to(0, arm)
        canvas.stroke()

        canvas.restore()

    def draw_compass(self, canvas: Canvas, x: float, y: float, radius: float,
                     heading: Optional[float]):
        """
        Draw the compass widget centred on (x, y).

        Nothing is drawn when the heading is unavailable. The arrow is
        rotated by the negative heading so it keeps pointing north.
        """
        if heading is None:
            return

        canvas.save()
        canvas.translate(x, y)

        canvas.set_style(stroke=COMPASS_OUTLINE_COLOR, line_width=2)
        canvas.begin_path()
        canvas.arc(0, 0, radius, 0, 2 * math.pi)
        canvas.stroke()

        # North tick and label
        canvas.set_style(stroke=NORTH_COLOR, fill=NORTH_COLOR, line_width=3)
        canvas.begin_path()
        canvas.move_to(0, -radius + 5)
        canvas.line_to(0, -radius + 15)
        canvas.stroke()
        canvas.fill_text("N", 0, -radius + 25, 12)

        canvas.rotate(math.radians(-heading))
        canvas.set_style(stroke=ARROW_COLOR, fill=ARROW_COLOR, line_width=3)
        canvas.begin_path()
        canvas.move_to(0, -radius + 10)
        canvas.line_to(-5, -radius + 20)
        canvas.line_to(0, -radius + 15)
        canvas.line_to(5, -radius + 20)
        canvas.close_path()
        canvas.fill()
        canvas.stroke()

        canvas.restore()

    def format_status(self,
                      relative: RelativeOrientation,
                      absolute: AbsoluteOrientation,
                      position: Position,
                      heading: Optional[float]) -> str:
        lines = []

        if has_position(position):
            lines.append(f"GPS: {position.lat:.5f}, {position.lon:.5f} (±{position.accuracy:.0f}m)")
        else:
            lines.append(f"GPS: {WAITING}")

        if has_orientation(relative):
            lines.append(f"Relative orientation: {_angles(relative)}")
        else:
            lines.append(f"Relative orientation: {WAITING}")

        if has_orientation(absolute):
            lines.append(f"Absolute orientation: {_angles(absolute)}")
            lines.append(f"Absolute reading: {'Yes' if absolute.absolute else 'No'}")
        else:
            lines.append(f"Absolute orientation: {WAITING}")

        if heading is not None:
            lines.append(f"Heading: {heading:.1f}°")
        else:
            lines.append(f"Heading: {UNAVAILABLE}")

        return "\n".join(lines)


def _angles(orientation) -> str:
    return (f"α:{orientation.alpha or 0:.1f}° "
            f"β:{orientation.beta or 0:.1f}° "
            f"γ:{orientation.gamma or 0:.1f}°")
