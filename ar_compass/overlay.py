"""
OpenCV rasterizer for recorded canvas commands and the status text block.
"""

import logging
import re
from typing import Iterable, List, Tuple

import cv2
import numpy as np

from .canvas import DrawCommand

logger = logging.getLogger(__name__)

_RGBA_PATTERN = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)")

# Hershey fonts only cover ASCII
_ASCII_FOLD = {
    '°': ' deg',
    '±': '+/-',
    'α': 'a',
    'β': 'b',
    'γ': 'g',
}

ARC_SEGMENTS = 48


def parse_color(color: str) -> Tuple[Tuple[int, int, int], float]:
    """
    Parse an "rgba(r,g,b,a)" or "rgb(r,g,b)" string.

    Args:
        color: Colour string

    Returns:
        Tuple of (BGR colour, alpha in [0, 1])
    """
    match = _RGBA_PATTERN.fullmatch(color.strip())
    if not match:
        raise ValueError(f"Unsupported colour: {color!r}")
    r, g, b = (int(match.group(i)) for i in (1, 2, 3))
    alpha = float(match.group(4)) if match.group(4) is not None else 1.0
    return (b, g, r), min(max(alpha, 0.0), 1.0)


def fold_to_ascii(text: str) -> str:
    for symbol, replacement in _ASCII_FOLD.items():
        text = text.replace(symbol, replacement)
    return text.encode('ascii', 'ignore').decode('ascii')


def _translation(x: float, y: float) -> np.ndarray:
    return np.array([[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]])


def _rotation(radians: float) -> np.ndarray:
    c, s = np.cos(radians), np.sin(radians)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


class _RasterState:
    """Transform, style and path state while replaying commands."""

    def __init__(self):
        self.matrix = np.eye(3)
        self.stroke = "rgba(0,0,0,1)"
        self.fill = "rgba(0,0,0,1)"
        self.line_width = 1.0
        self.stack: List[tuple] = []
        self.subpaths: List[Tuple[List[np.ndarray], bool]] = []

    def push(self):
        self.stack.append((self.matrix.copy(), self.stroke, self.fill, self.line_width))

    def pop(self):
        if self.stack:
            self.matrix, self.stroke, self.fill, self.line_width = self.stack.pop()

    def apply(self, x: float, y: float) -> np.ndarray:
        point = self.matrix @ np.array([x, y, 1.0])
        return point[:2]

    def add_point(self, point: np.ndarray, new_subpath: bool = False):
        if new_subpath or not self.subpaths:
            self.subpaths.append(([], False))
        self.subpaths[-1][0].append(point)

    def close(self):
        if self.subpaths:
            points, _ = self.subpaths[-1]
            self.subpaths[-1] = (points, True)

    def polygons(self) -> List[Tuple[np.ndarray, bool]]:
        result = []
        for points, closed in self.subpaths:
            if len(points) >= 2:
                pts = np.round(np.array(points)).astype(np.int32).reshape(-1, 1, 2)
                result.append((pts, closed))
        return result


def _blend(frame: np.ndarray, layer: np.ndarray, alpha: float):
    if alpha >= 1.0:
        frame[:] = layer
    else:
        cv2.addWeighted(layer, alpha, frame, 1.0 - alpha, 0, dst=frame)


def _stroke_polygons(frame, polygons, color: str, line_width: float):
    if not polygons:
        return
    bgr, alpha = parse_color(color)
    layer = frame.copy()
    thickness = max(1, int(round(line_width)))
    for pts, closed in polygons:
        cv2.polylines(layer, [pts], closed, bgr, thickness, cv2.LINE_AA)
    _blend(frame, layer, alpha)


def rasterize(commands: Iterable[DrawCommand], frame: np.ndarray) -> np.ndarray:
    """
    Replay recorded canvas commands onto a camera frame.

    Args:
        commands: Commands recorded by a Canvas
        frame: BGR frame the overlay is drawn over

    Returns:
        New frame with the overlay applied
    """
    overlay_frame = frame.copy()
    state = _RasterState()

    for command in commands:
        op, args = command.op, command.args

        if op == "clear_rect":
            # The overlay is composed onto a fresh camera frame every tick
            continue
        elif op == "save":
            state.push()
        elif op == "restore":
            state.pop()
        elif op == "translate":
            state.matrix = state.matrix @ _translation(*args)
        elif op == "rotate":
            state.matrix = state.matrix @ _rotation(args[0])
        elif op == "set_style":
            stroke, fill, line_width = args
            if stroke is not None:
                state.stroke = stroke
            if fill is not None:
                state.fill = fill
            if line_width is not None:
                state.line_width = line_width
        elif op == "stroke_rect":
            x, y, w, h = args
            corners = [state.apply(px, py) for px, py in
                       ((x, y), (x + w, y), (x + w, y + h), (x, y + h))]
            pts = np.round(np.array(corners)).astype(np.int32).reshape(-1, 1, 2)
            _stroke_polygons(overlay_frame, [(pts, True)], state.stroke, state.line_width)
        elif op == "begin_path":
            state.subpaths = []
        elif op == "move_to":
            state.add_point(state.apply(*args), new_subpath=True)
        elif op == "line_to":
            state.add_point(state.apply(*args))
        elif op == "arc":
            x, y, radius, start, end = args
            for angle in np.linspace(start, end, ARC_SEGMENTS + 1):
                state.add_point(state.apply(x + radius * np.cos(angle),
                                            y + radius * np.sin(angle)))
        elif op == "close_path":
            state.close()
        elif op == "stroke":
            _stroke_polygons(overlay_frame, state.polygons(), state.stroke, state.line_width)
        elif op == "fill":
            polygons = state.polygons()
            if polygons:
                bgr, alpha = parse_color(state.fill)
                layer = overlay_frame.copy()
                cv2.fillPoly(layer, [pts for pts, _ in polygons], bgr, cv2.LINE_AA)
                _blend(overlay_frame, layer, alpha)
        elif op == "fill_text":
            text, x, y, font_px = args
            bgr, alpha = parse_color(state.fill)
            scale = font_px / 22.0
            label = fold_to_ascii(text)
            (text_width, _), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, scale, 1)
            anchor = state.apply(x, y)
            origin = (int(round(anchor[0] - text_width / 2)), int(round(anchor[1])))
            layer = overlay_frame.copy()
            cv2.putText(layer, label, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, bgr, 1, cv2.LINE_AA)
            _blend(overlay_frame, layer, alpha)
        else:
            logger.warning(f"Skipping unknown draw command: {op}")

    return overlay_frame


def draw_status_text(frame: np.ndarray,
                     text: str,
                     text_scale: float = 0.5,
                     text_thickness: int = 1,
                     line_height: int = 20) -> np.ndarray:
    """
    Draw the multi-line status block in the top-left corner.

    Args:
        frame: Input frame
        text: Status text, one entry per line
        text_scale: OpenCV font scale
        text_thickness: OpenCV font thickness
        line_height: Vertical distance between lines in pixels

    Returns:
        Frame with the status block
    """
    overlay_frame = frame.copy()
    lines = [fold_to_ascii(line) for line in text.splitlines()]
    if not lines:
        return overlay_frame

    widths = [cv2.getTextSize(line, cv2.FONT_HERSHEY_SIMPLEX, text_scale, text_thickness)[0][0]
              for line in lines]
    box_right = 10 + max(widths) + 20
    box_bottom = 10 + line_height * len(lines) + 10

    # Background rectangle for text
    cv2.rectangle(overlay_frame, (10, 10), (box_right, box_bottom), (0, 0, 0), -1)
    cv2.rectangle(overlay_frame, (10, 10), (box_right, box_bottom), (255, 255, 255), 2)

    for i, line in enumerate(lines):
        y_pos = 30 + i * line_height
        cv2.putText(overlay_frame, line, (20, y_pos),
                    cv2.FONT_HERSHEY_SIMPLEX, text_scale, (255, 255, 255), text_thickness)

    return overlay_frame
