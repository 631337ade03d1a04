import logging

from processing.geometry import descriptor_distance
from schemas.observation import FrameObservation

logger = logging.getLogger("uvicorn.error")


def update_identity(observation: FrameObservation, session) -> float | None:
    """Capture the reference descriptor once, then track similarity against it.

    Returns the new identity confidence, or None when no comparison happened
    on this frame. Raises DescriptorMismatch if the detector changes the
    descriptor dimension mid-session.
    """
    if session.reference_descriptor is None:
        if len(session.history) >= session.thresholds.reference_capture_history_min:
            session.reference_descriptor = tuple(observation.descriptor)
            logger.info(f"[Identity] reference descriptor captured after {len(session.history)} frames")
        return None

    distance = descriptor_distance(observation.descriptor, session.reference_descriptor)
    session.identity_confidence = max(0.0, 1.0 - distance)
    return session.identity_confidence


def identity_matched(session) -> bool:
    return (
        session.reference_descriptor is not None
        and session.identity_confidence > session.thresholds.identity_threshold
    )
