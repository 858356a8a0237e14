"""
Recording 2-D drawing surface.

The renderer draws into a Canvas, which records every call as a DrawCommand.
The command list is later rasterized onto a camera frame with OpenCV, and
compared directly in tests.
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class DrawCommand:
    op: str
    args: Tuple = ()


class Canvas:
    """Drawing surface sized to the display, mirroring a 2-D context API."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._commands: List[DrawCommand] = []

    def resize(self, width: int, height: int):
        """Resize to the new viewport; the surface is simply reset."""
        self.width = width
        self.height = height
        self.reset()

    def reset(self):
        self._commands = []

    @property
    def commands(self) -> List[DrawCommand]:
        return list(self._commands)

    def _record(self, op: str, *args):
        self._commands.append(DrawCommand(op, tuple(args)))

    def clear_rect(self, x: float, y: float, width: float, height: float):
        self._record("clear_rect", x, y, width, height)

    def save(self):
        self._record("save")

    def restore(self):
        self._record("restore")

    def translate(self, x: float, y: float):
        self._record("translate", x, y)

    def rotate(self, radians: float):
        self._record("rotate", radians)

    def set_style(self, stroke: str = None, fill: str = None, line_width: float = None):
        """
        Set stroke colour, fill colour and line width.

        Args:
            stroke: Stroke colour as an "rgba(r,g,b,a)" string
            fill: Fill colour as an "rgba(r,g,b,a)" string
            line_width: Line width in pixels
        """
        self._record("set_style", stroke, fill, line_width)

    def stroke_rect(self, x: float, y: float, width: float, height: float):
        self._record("stroke_rect", x, y, width, height)

    def begin_path(self):
        self._record("begin_path")

    def move_to(self, x: float, y: float):
        self._record("move_to", x, y)

    def line_to(self, x: float, y: float):
        self._record("line_to", x, y)

    def arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float):
        self._record("arc", x, y, radius, start_angle, end_angle)

    def close_path(self):
        self._record("close_path")

    def stroke(self):
        self._record("stroke")

    def fill(self):
        self._record("fill")

    def fill_text(self, text: str, x: float, y: float, font_px: int = 12):
        """Draw text centred horizontally on x."""
        self._record("fill_text", text, x, y, font_px)
