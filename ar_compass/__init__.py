"""
AR Compass
Camera overlay with a rotation-tracking marker and a compass driven by
device orientation and geolocation sensors.
"""

from .ar_session import ARSession
from .canvas import Canvas, DrawCommand
from .heading import HeadingSource, resolve_heading, resolve_heading_source
from .render_loop import FrameScheduler, LoopState, RenderLoop
from .renderer import FrameRenderer
from .sensor_state import AbsoluteOrientation, Position, RelativeOrientation, SensorStateStore

__version__ = "1.0.0"
__all__ = [
    "ARSession",
    "Canvas",
    "DrawCommand",
    "HeadingSource",
    "resolve_heading",
    "resolve_heading_source",
    "FrameScheduler",
    "LoopState",
    "RenderLoop",
    "FrameRenderer",
    "AbsoluteOrientation",
    "Position",
    "RelativeOrientation",
    "SensorStateStore",
]
