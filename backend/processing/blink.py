import logging

from processing.geometry import compute_ear, is_degenerate_eye

logger = logging.getLogger("uvicorn.error")


def update_blinks(eye_left, eye_right, session, now: float) -> tuple[float | None, bool]:
    """Compute the average EAR and update the closed-eye run and blink events in session.

    Returns (avg_ear, blinked). avg_ear is None when either eye contour is
    degenerate; such frames leave the run length untouched.
    """
    thresholds = session.thresholds
    blinked = False
    avg_ear = None

    if is_degenerate_eye(eye_left) or is_degenerate_eye(eye_right):
        logger.debug("[Blink] degenerate eye landmarks, frame skipped")
    else:
        avg_ear = (compute_ear(eye_left) + compute_ear(eye_right)) / 2.0

        if avg_ear < thresholds.ear_closed:
            session.eye_closed_run_length += 1
        else:
            run = session.eye_closed_run_length
            if thresholds.blink_run_min < run < thresholds.blink_run_max:
                session.blink_events.append(now)
                blinked = True
                logger.info(f"[Blink] detected after {run} closed frames, total={len(session.blink_events)}")
            elif run >= thresholds.blink_run_max:
                logger.info(f"[Blink] ignored sustained closure of {run} frames")
            session.eye_closed_run_length = 0

    session.prune_blinks(now)
    return avg_ear, blinked
