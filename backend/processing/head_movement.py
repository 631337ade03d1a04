import logging

from processing.geometry import estimate_head_pose, angle_delta
from schemas.observation import FrameObservation
from state.session import HeadMovementEvent

logger = logging.getLogger("uvicorn.error")


def update_head_movement(observation: FrameObservation, session, now: float) -> HeadMovementEvent | None:
    """Compare the current pose with the previous frame's and record a movement event."""
    pose = estimate_head_pose(
        observation.eye_landmarks_left,
        observation.eye_landmarks_right,
        observation.nose_landmarks,
        observation.mouth_landmarks,
    )
    event = None

    if pose is not None:
        last = session.last_pose
        if last is not None:
            if session.thresholds.wrap_head_angles:
                yaw_delta = angle_delta(pose.yaw, last.yaw)
                pitch_delta = angle_delta(pose.pitch, last.pitch)
            else:
                yaw_delta = abs(pose.yaw - last.yaw)
                pitch_delta = abs(pose.pitch - last.pitch)
            limit = session.thresholds.movement_angle_deg
            if yaw_delta > limit or pitch_delta > limit:
                event = HeadMovementEvent(timestamp=now, yaw_delta=yaw_delta, pitch_delta=pitch_delta)
                session.head_movement_events.append(event)
                logger.info(
                    f"[HeadMovement] yaw={yaw_delta:.1f} pitch={pitch_delta:.1f}, "
                    f"total={len(session.head_movement_events)}"
                )
        session.last_pose = pose

    session.prune_head_movements(now)
    return event
