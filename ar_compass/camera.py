"""
Camera acquisition using OpenCV.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .errors import CameraError

logger = logging.getLogger(__name__)


class CameraSource:
    """Live video stream from a local camera."""

    def __init__(self,
                 camera_index: int = 0,
                 frame_width: int = 1280,
                 frame_height: int = 720,
                 flip_horizontal: bool = False):
        """
        Initialize the camera source.

        Args:
            camera_index: Camera device index
            frame_width: Requested frame width, the device may choose another
            frame_height: Requested frame height
            flip_horizontal: Mirror frames, for front-facing cameras
        """
        self.camera_index = camera_index
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.flip_horizontal = flip_horizontal
        self.cap = None

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def start(self):
        """
        Open the camera.

        Raises:
            CameraError: If the device cannot be opened
        """
        if self.is_open:
            return

        try:
            self.cap = cv2.VideoCapture(self.camera_index)
        except cv2.error as e:
            raise CameraError(f"Could not access camera {self.camera_index}: {e}") from e

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)

        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            raise CameraError(f"Could not access camera {self.camera_index}")

        logger.info(f"Camera {self.camera_index} started "
                    f"({int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
                    f"{int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))})")

    def read(self) -> Optional[np.ndarray]:
        """
        Grab the next frame.

        Returns:
            BGR frame, or None when the camera is closed or the read failed
        """
        if not self.is_open:
            return None
        ret, frame = self.cap.read()
        if not ret:
            return None
        if self.flip_horizontal:
            frame = cv2.flip(frame, 1)
        return frame

    def release(self):
        """Stop the stream; safe to call when already released."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Camera {self.camera_index} released")
