"""
Compass heading resolution from the relative and absolute orientation records.
"""

import math
from enum import Enum
from numbers import Real
from typing import Optional, Tuple


class HeadingSource(Enum):
    """Which orientation record the heading was taken from."""
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    UNAVAILABLE = "unavailable"


def is_defined_angle(value) -> bool:
    # bool is a Real subclass but never a valid angle
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value)


def resolve_heading_source(relative, absolute) -> Tuple[Optional[float], HeadingSource]:
    """
    Pick the best available heading and report where it came from.

    Args:
        relative: Record with an ``alpha`` attribute (relative orientation)
        absolute: Record with ``alpha`` and ``absolute`` attributes

    Returns:
        Tuple of (heading in degrees or None, source)
    """
    if absolute.absolute and is_defined_angle(absolute.alpha):
        return float(absolute.alpha), HeadingSource.ABSOLUTE
    if is_defined_angle(relative.alpha):
        # Lower confidence: not referenced to true north
        return float(relative.alpha), HeadingSource.RELATIVE
    return None, HeadingSource.UNAVAILABLE


def resolve_heading(relative, absolute) -> Optional[float]:
    """
    Resolve a single compass heading in degrees.

    A true-north absolute reading wins, then the relative alpha. None means
    the heading is unavailable and is never returned as 0.
    """
    heading, _ = resolve_heading_source(relative, absolute)
    return heading
