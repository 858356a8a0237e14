"""
Exceptions raised while acquiring the camera and orientation sensors.
"""


class ARError(Exception):
    """Base class for AR session errors."""


class AcquisitionError(ARError):
    """A sensor or device needed to start the session could not be acquired."""


class CameraError(AcquisitionError):
    """The camera could not be opened or stopped delivering frames."""


class OrientationPermissionError(AcquisitionError):
    """The user or the platform refused access to orientation events."""
