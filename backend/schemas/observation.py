from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class FrameObservation(BaseModel):
    """One detected face in one processed frame, as produced by the external detector."""

    model_config = ConfigDict(frozen=True)

    timestamp: float = 0.0
    detection_confidence: float = Field(ge=0.0, le=1.0)
    eye_landmarks_left: list[Point]
    eye_landmarks_right: list[Point]
    nose_landmarks: list[Point] = Field(default_factory=list)
    mouth_landmarks: list[Point] = Field(default_factory=list)
    descriptor: list[float]
    expressions: dict[str, float] = Field(default_factory=dict)  # insertion order preserved
