import logging

from state.session import ExpressionEvent

logger = logging.getLogger("uvicorn.error")


def dominant_expression(expressions: dict[str, float]) -> tuple[str, float] | None:
    """Label with the highest probability; the earliest label wins ties."""
    best = None
    for label, confidence in expressions.items():
        if best is None or confidence > best[1]:
            best = (label, confidence)
    return best


def update_expressions(expressions: dict[str, float], session, now: float) -> ExpressionEvent | None:
    event = None
    dominant = dominant_expression(expressions)

    if dominant is not None:
        label, confidence = dominant
        if confidence > session.thresholds.expression_confidence:
            event = ExpressionEvent(timestamp=now, label=label, confidence=confidence)
            session.expression_events.append(event)
            logger.debug(f"[Expression] {label} ({confidence:.2f})")

    session.prune_expressions(now)
    return event
