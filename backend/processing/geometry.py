import math
from dataclasses import dataclass

import numpy as np

from config import LEFT_EYE_CORNER, RIGHT_EYE_CORNER, NOSE_TOP, NOSE_BOTTOM, MOUTH_TOP


class DescriptorMismatch(ValueError):
    """Two face descriptors of different dimension were compared."""


@dataclass(frozen=True)
class HeadPose:
    yaw: float
    pitch: float


def _dist(a, b):
    return ((a.x - b.x) ** 2 + (a.y - b.y) ** 2) ** 0.5


def _midpoint(a, b):
    return (a.x + b.x) / 2.0, (a.y + b.y) / 2.0


def is_degenerate_eye(eye) -> bool:
    return len(eye) < 6 or _dist(eye[0], eye[3]) == 0


def compute_ear(eye) -> float:
    """Eye Aspect Ratio = (|p1-p5| + |p2-p4|) / (2*|p0-p3|)

    Returns 0.0 when the contour is malformed or has no horizontal extent.
    """
    if is_degenerate_eye(eye):
        return 0.0
    p0, p1, p2, p3, p4, p5 = eye[:6]
    vertical1 = _dist(p1, p5)
    vertical2 = _dist(p2, p4)
    horizontal = _dist(p0, p3)
    return (vertical1 + vertical2) / (2.0 * horizontal)


def estimate_head_pose(left_eye, right_eye, nose, mouth) -> HeadPose | None:
    """Rough yaw/pitch in degrees from 2D landmarks.

    This is not a calibrated 3D pose. The angles only mean something when
    compared across frames of the same face, which is all movement detection
    needs. Returns None when a landmark group is too short.
    """
    try:
        eye_x, eye_y = _midpoint(left_eye[LEFT_EYE_CORNER], right_eye[RIGHT_EYE_CORNER])
        nose_x, nose_y = _midpoint(nose[NOSE_TOP], nose[NOSE_BOTTOM])
        mouth_top = mouth[MOUTH_TOP]
    except IndexError:
        return None

    yaw = math.degrees(math.atan2(nose_x - eye_x, eye_y - nose_y))
    pitch = math.degrees(math.atan2(mouth_top.y - eye_y, eye_x - mouth_top.x))
    return HeadPose(yaw=yaw, pitch=pitch)


def angle_delta(a: float, b: float) -> float:
    """Absolute angular difference in degrees, wrapped into [0, 180]."""
    delta = abs(a - b) % 360.0
    return 360.0 - delta if delta > 180.0 else delta


def descriptor_distance(a, b) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DescriptorMismatch(f"descriptor dimensions differ: {a.shape} vs {b.shape}")
    return float(np.linalg.norm(a - b))
