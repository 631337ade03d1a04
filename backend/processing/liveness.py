from config import (
    LIVENESS_BLINK_WEIGHT_FULL, LIVENESS_BLINK_WEIGHT_PARTIAL,
    LIVENESS_MOVEMENT_WEIGHT, LIVENESS_EXPRESSION_WEIGHT, LIVENESS_QUALITY_WEIGHT,
)
from processing.quality import clamp_unit


def compute_liveness_score(blink_count: int, movement_count: int, expression_count: int, quality_signal: float) -> float:
    """Weighted liveness confidence in [0, 1] from event counts and the quality signal."""
    score = 0.0

    if blink_count >= 2:
        score += LIVENESS_BLINK_WEIGHT_FULL
    elif blink_count >= 1:
        score += LIVENESS_BLINK_WEIGHT_PARTIAL

    if movement_count >= 1:
        score += LIVENESS_MOVEMENT_WEIGHT

    if expression_count >= 1:
        score += LIVENESS_EXPRESSION_WEIGHT

    score += clamp_unit(quality_signal) * LIVENESS_QUALITY_WEIGHT
    return clamp_unit(score)


def update_liveness(session) -> float:
    session.liveness_score = compute_liveness_score(
        len(session.blink_events),
        len(session.head_movement_events),
        len(session.expression_events),
        session.quality_signal,
    )
    return session.liveness_score


def liveness_verified(session) -> bool:
    return session.liveness_score > session.thresholds.liveness_threshold
