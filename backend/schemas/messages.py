from typing import Literal

from pydantic import BaseModel

from schemas.observation import FrameObservation


class ThresholdOverrides(BaseModel):
    face_confidence: float | None = None
    liveness_threshold: float | None = None
    identity_threshold: float | None = None
    ear_closed: float | None = None
    blink_run_min: int | None = None
    blink_run_max: int | None = None
    movement_angle_deg: float | None = None
    expression_confidence: float | None = None
    expression_strong_confidence: float | None = None
    privileged_expressions: list[str] | None = None
    blinks_required: int | None = None
    movements_required: int | None = None
    reference_capture_history_min: int | None = None
    wrap_head_angles: bool | None = None


class ConfigureMessage(BaseModel):
    type: Literal["configure"] = "configure"
    thresholds: ThresholdOverrides | None = None
    identity_gating: Literal["enforced", "informational"] | None = None


class FrameMessage(BaseModel):
    type: Literal["frame"] = "frame"
    detections: list[FrameObservation]


class FrameResponse(BaseModel):
    type: str = "frame_result"
    step: str
    step_index: int
    instruction: str
    face_detected: bool
    faces: int
    face_detection_confidence: float
    liveness_score: float
    identity_confidence: float
    quality_signal: float
    blink_count: int
    head_movement_count: int
    expression_count: int
    liveness_verified: bool
    identity_matched: bool
    reference_captured: bool
    completed_steps: list[int] = []
    warning: str | None = None
    complete: bool = False


class ErrorResponse(BaseModel):
    type: str = "error"
    message: str
