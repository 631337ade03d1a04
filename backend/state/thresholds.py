from dataclasses import dataclass, field, replace
from enum import Enum

from config import (
    FACE_CONFIDENCE, LIVENESS_THRESHOLD, IDENTITY_THRESHOLD,
    RECOMMENDED_FACE_CONFIDENCE, RECOMMENDED_LIVENESS_THRESHOLD, RECOMMENDED_IDENTITY_THRESHOLD,
    EAR_THRESHOLD, BLINK_RUN_MIN, BLINK_RUN_MAX, BLINKS_REQUIRED,
    MOVEMENT_ANGLE_DEG, MOVEMENTS_REQUIRED,
    EXPRESSION_CONFIDENCE, EXPRESSION_STRONG_CONFIDENCE, PRIVILEGED_EXPRESSIONS,
    REFERENCE_CAPTURE_HISTORY_MIN, WRAP_HEAD_ANGLES,
)


class IdentityGatingMode(str, Enum):
    ENFORCED = "enforced"
    INFORMATIONAL = "informational"


# Raising any of these makes verification harder to pass
_STRICTER_WHEN_HIGHER = (
    "face_confidence",
    "liveness_threshold",
    "identity_threshold",
    "expression_confidence",
    "expression_strong_confidence",
    "movement_angle_deg",
    "blinks_required",
    "movements_required",
    "reference_capture_history_min",
)

_PROBABILITIES = (
    "face_confidence",
    "liveness_threshold",
    "identity_threshold",
    "expression_confidence",
    "expression_strong_confidence",
)


@dataclass(frozen=True)
class ThresholdConfig:
    face_confidence: float = field(default_factory=lambda: FACE_CONFIDENCE)
    liveness_threshold: float = field(default_factory=lambda: LIVENESS_THRESHOLD)
    identity_threshold: float = field(default_factory=lambda: IDENTITY_THRESHOLD)
    ear_closed: float = field(default_factory=lambda: EAR_THRESHOLD)
    blink_run_min: int = field(default_factory=lambda: BLINK_RUN_MIN)
    blink_run_max: int = field(default_factory=lambda: BLINK_RUN_MAX)
    movement_angle_deg: float = field(default_factory=lambda: MOVEMENT_ANGLE_DEG)
    expression_confidence: float = field(default_factory=lambda: EXPRESSION_CONFIDENCE)
    expression_strong_confidence: float = field(default_factory=lambda: EXPRESSION_STRONG_CONFIDENCE)
    privileged_expressions: tuple[str, ...] = field(default_factory=lambda: PRIVILEGED_EXPRESSIONS)
    blinks_required: int = field(default_factory=lambda: BLINKS_REQUIRED)
    movements_required: int = field(default_factory=lambda: MOVEMENTS_REQUIRED)
    reference_capture_history_min: int = field(default_factory=lambda: REFERENCE_CAPTURE_HISTORY_MIN)
    wrap_head_angles: bool = field(default_factory=lambda: WRAP_HEAD_ANGLES)

    def __post_init__(self):
        for name in _PROBABILITIES:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.ear_closed < 0:
            raise ValueError(f"ear_closed must be non-negative, got {self.ear_closed}")
        if self.movement_angle_deg < 0:
            raise ValueError(f"movement_angle_deg must be non-negative, got {self.movement_angle_deg}")
        if self.blink_run_min < 0 or self.blink_run_min >= self.blink_run_max:
            raise ValueError(
                f"blink run bounds must satisfy 0 <= min < max, got {self.blink_run_min}..{self.blink_run_max}"
            )
        for name in ("blinks_required", "movements_required", "reference_capture_history_min"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        # Normalise lists coming from JSON
        object.__setattr__(self, "privileged_expressions", tuple(self.privileged_expressions))

    @classmethod
    def recommended(cls) -> "ThresholdConfig":
        """The stricter baseline the shipped defaults were relaxed from."""
        return cls(
            face_confidence=RECOMMENDED_FACE_CONFIDENCE,
            liveness_threshold=RECOMMENDED_LIVENESS_THRESHOLD,
            identity_threshold=RECOMMENDED_IDENTITY_THRESHOLD,
        )

    def with_overrides(self, **overrides) -> "ThresholdConfig":
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **overrides)

    def weakened_fields(self, baseline: "ThresholdConfig | None" = None) -> list[str]:
        """Names of thresholds that are more permissive than ``baseline``."""
        baseline = baseline or ThresholdConfig.recommended()
        return [
            name for name in _STRICTER_WHEN_HIGHER
            if getattr(self, name) < getattr(baseline, name)
        ]
