import logging

from processing.identity import identity_matched
from processing.liveness import liveness_verified
from state.session import SessionState, VerificationStep, ExpressionEvent
from state.thresholds import IdentityGatingMode
from state.timers import DeferredTransition

logger = logging.getLogger("uvicorn.error")

INSTRUCTIONS = {
    VerificationStep.AWAIT_FACE: "Center your face in the camera",
    VerificationStep.AWAIT_BLINK: "Blink naturally a few times",
    VerificationStep.AWAIT_HEAD_MOVEMENT: "Turn your head slightly from left to right",
    VerificationStep.AWAIT_EXPRESSION: "Smile briefly, then return to a neutral expression",
    VerificationStep.AWAIT_GAZE: "Look straight at the camera",
    VerificationStep.ANALYZING: "Analyzing biometric data...",
    VerificationStep.COMPLETE: "Verification complete",
}

NO_FACE_WARNING = "Face not detected - position yourself in front of the camera"
MULTIPLE_FACES_WARNING = "Multiple faces detected - make sure you are alone in front of the camera"


def advance(session: SessionState, now: float) -> VerificationStep:
    """Move exactly one step forward and notify completion of the step being left."""
    left = session.current_step
    if left == VerificationStep.COMPLETE:
        return left

    session.current_step = VerificationStep(left + 1)
    session.completed_steps.append(int(left))
    logger.info(f"[Steps] {left.name} completed -> {session.current_step.name}")

    if session.current_step == VerificationStep.ANALYZING and session.analyzing_timer is None:
        session.analyzing_timer = DeferredTransition(due_at=now + session.analyzing_delay_s)
        session.analysis_elapsed = False
    return session.current_step


def completion_allowed(session: SessionState, identity_fresh: bool = False) -> bool:
    """Enforced gating only trusts a similarity computed on the current single-face frame."""
    if session.identity_gating == IdentityGatingMode.INFORMATIONAL:
        return True
    return identity_fresh and identity_matched(session) and liveness_verified(session)


def _try_complete(session: SessionState, now: float, identity_fresh: bool = False) -> bool:
    if session.current_step != VerificationStep.ANALYZING or not session.analysis_elapsed:
        return False
    if not completion_allowed(session, identity_fresh):
        return False
    advance(session, now)
    return True


def fire_due_transitions(session: SessionState, now: float) -> bool:
    """Fire the pending Analyzing deadline if it has passed. Returns True if the step changed."""
    timer = session.analyzing_timer
    if session.closed or session.multiple_subjects or timer is None:
        return False
    if not timer.is_due(now):
        return False
    timer.fire()
    session.analysis_elapsed = True
    logger.info(f"[Steps] analysis delay of {session.analyzing_delay_s:.1f}s elapsed")
    completed = _try_complete(session, now)
    if not completed:
        logger.info("[Steps] completion held until a matching face is seen")
    return completed


def evaluate_step(
    session: SessionState,
    expression_event: ExpressionEvent | None,
    now: float,
    identity_fresh: bool = False,
) -> bool:
    """Check the exit condition of the current step only. Returns True on transition."""
    step = session.current_step
    thresholds = session.thresholds

    if step == VerificationStep.AWAIT_FACE:
        passed = session.face_detection_confidence > thresholds.face_confidence
    elif step == VerificationStep.AWAIT_BLINK:
        passed = len(session.blink_events) >= thresholds.blinks_required
    elif step == VerificationStep.AWAIT_HEAD_MOVEMENT:
        passed = len(session.head_movement_events) >= thresholds.movements_required
    elif step == VerificationStep.AWAIT_EXPRESSION:
        passed = expression_event is not None and (
            expression_event.label in thresholds.privileged_expressions
            or expression_event.confidence > thresholds.expression_strong_confidence
        )
    elif step == VerificationStep.AWAIT_GAZE:
        passed = liveness_verified(session)
    elif step == VerificationStep.ANALYZING:
        return _try_complete(session, now, identity_fresh)
    else:
        return False

    if passed:
        advance(session, now)
    return passed
