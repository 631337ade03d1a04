import logging

from processing.blink import update_blinks
from processing.expressions import update_expressions
from processing.head_movement import update_head_movement
from processing.identity import update_identity, identity_matched
from processing.liveness import update_liveness, liveness_verified
from processing.quality import clamp_unit
from processing.steps import (
    INSTRUCTIONS, NO_FACE_WARNING, MULTIPLE_FACES_WARNING,
    evaluate_step, fire_due_transitions,
)
from schemas.messages import FrameResponse
from schemas.observation import FrameObservation
from state.session import SessionState, VerificationStep

logger = logging.getLogger("uvicorn.error")


def build_response(session: SessionState, faces: int, completed_before: int) -> dict:
    return FrameResponse(
        step=session.current_step.name,
        step_index=int(session.current_step),
        instruction=INSTRUCTIONS[session.current_step],
        face_detected=faces == 1,
        faces=faces,
        face_detection_confidence=session.face_detection_confidence,
        liveness_score=session.liveness_score,
        identity_confidence=session.identity_confidence,
        quality_signal=session.quality_signal,
        blink_count=len(session.blink_events),
        head_movement_count=len(session.head_movement_events),
        expression_count=len(session.expression_events),
        liveness_verified=liveness_verified(session),
        identity_matched=identity_matched(session),
        reference_captured=session.reference_descriptor is not None,
        completed_steps=session.completed_steps[completed_before:],
        warning=session.warning,
        complete=session.current_step == VerificationStep.COMPLETE,
    ).model_dump()


def _refresh_liveness(session: SessionState, now: float):
    """Age out stale events and rescore, whether or not a face was seen."""
    session.prune_events(now)
    update_liveness(session)


def _handle_no_face(session: SessionState):
    session.face_detection_confidence = 0.0
    session.warning = NO_FACE_WARNING if session.current_step > VerificationStep.AWAIT_FACE else None


def _handle_multiple_faces(session: SessionState, faces: int):
    if not session.multiple_subjects:
        logger.warning(f"[Pipeline] {faces} faces in frame, step advancement suspended")
    session.multiple_subjects = True
    session.warning = MULTIPLE_FACES_WARNING


def _process_single(observation: FrameObservation, session: SessionState, now: float):
    session.warning = None
    session.face_detection_confidence = observation.detection_confidence
    session.record(observation)

    # Liveness signals
    update_blinks(observation.eye_landmarks_left, observation.eye_landmarks_right, session, now)
    update_head_movement(observation, session, now)
    expression_event = update_expressions(observation.expressions, session, now)
    session.quality_signal = clamp_unit(session.quality_provider.measure(observation))
    update_liveness(session)

    identity_fresh = update_identity(observation, session) is not None

    # --- State machine ---
    evaluate_step(session, expression_event, now, identity_fresh)


def process_frame(observations: list[FrameObservation] | None, session: SessionState, now: float | None = None) -> dict:
    """Process the detections of one frame. Returns a JSON-serializable dict.

    ``observations`` is None when the collaborator had no new frame this tick;
    only due deferred transitions are handled then.
    Event windows are pruned and the liveness score recomputed on every call.
    """
    with session.lock:
        if now is None:
            now = session.clock()
        completed_before = len(session.completed_steps)

        if session.closed:
            return build_response(session, 0, completed_before)

        _refresh_liveness(session, now)

        if observations is None:
            fire_due_transitions(session, now)
            return build_response(session, 0, completed_before)

        faces = len(observations)
        if faces > 1:
            _handle_multiple_faces(session, faces)
            return build_response(session, faces, completed_before)

        session.multiple_subjects = False
        fire_due_transitions(session, now)
        if faces == 0:
            _handle_no_face(session)
        else:
            _process_single(observations[0], session, now)

        return build_response(session, faces, completed_before)


def tick(session: SessionState, now: float | None = None) -> dict | None:
    """Idle-time pruning and Analyzing deadline check. Returns a response only if the step changed."""
    with session.lock:
        if now is None:
            now = session.clock()
        completed_before = len(session.completed_steps)
        if session.closed:
            return None
        _refresh_liveness(session, now)
        if not fire_due_transitions(session, now):
            return None
        return build_response(session, 0, completed_before)
