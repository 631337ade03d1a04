import threading
import time
from collections import deque
from enum import IntEnum
from dataclasses import dataclass, field
from typing import Callable

from config import (
    HISTORY_SIZE, ANALYZING_DELAY_S, IDENTITY_GATING,
    BLINK_WINDOW_S, MOVEMENT_WINDOW_S, EXPRESSION_WINDOW_S,
)
from processing.geometry import HeadPose
from processing.quality import QualitySignalProvider, RandomQualitySignal
from schemas.observation import FrameObservation
from state.thresholds import ThresholdConfig, IdentityGatingMode
from state.timers import DeferredTransition


class VerificationStep(IntEnum):
    AWAIT_FACE = 1
    AWAIT_BLINK = 2
    AWAIT_HEAD_MOVEMENT = 3
    AWAIT_EXPRESSION = 4
    AWAIT_GAZE = 5
    ANALYZING = 6
    COMPLETE = 7


@dataclass(frozen=True)
class HeadMovementEvent:
    timestamp: float
    yaw_delta: float
    pitch_delta: float


@dataclass(frozen=True)
class ExpressionEvent:
    timestamp: float
    label: str
    confidence: float


def prune_window(events: list, now: float, window_s: float, key=lambda e: e) -> list:
    """Keep only events younger than ``window_s`` seconds."""
    return [e for e in events if now - key(e) < window_s]


@dataclass
class SessionState:
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    identity_gating: IdentityGatingMode = field(default_factory=lambda: IdentityGatingMode(IDENTITY_GATING))
    quality_provider: QualitySignalProvider = field(default_factory=RandomQualitySignal, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    analyzing_delay_s: float = field(default_factory=lambda: ANALYZING_DELAY_S)

    current_step: VerificationStep = VerificationStep.AWAIT_FACE
    history: deque = field(default_factory=lambda: deque(maxlen=HISTORY_SIZE), repr=False)

    # Liveness events
    blink_events: list[float] = field(default_factory=list)
    head_movement_events: list[HeadMovementEvent] = field(default_factory=list)
    expression_events: list[ExpressionEvent] = field(default_factory=list)
    eye_closed_run_length: int = 0
    last_pose: HeadPose | None = None

    # Scores
    face_detection_confidence: float = 0.0
    liveness_score: float = 0.0
    quality_signal: float = 0.0
    identity_confidence: float = 0.0
    reference_descriptor: tuple[float, ...] | None = field(default=None, repr=False)

    # Gating
    completed_steps: list[int] = field(default_factory=list)
    multiple_subjects: bool = False
    warning: str | None = None
    analyzing_timer: DeferredTransition | None = None
    analysis_elapsed: bool = False
    closed: bool = False

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def record(self, observation: FrameObservation):
        self.history.append(observation)

    def prune_blinks(self, now: float):
        self.blink_events = prune_window(self.blink_events, now, BLINK_WINDOW_S)

    def prune_head_movements(self, now: float):
        self.head_movement_events = prune_window(
            self.head_movement_events, now, MOVEMENT_WINDOW_S, key=lambda e: e.timestamp
        )

    def prune_expressions(self, now: float):
        self.expression_events = prune_window(
            self.expression_events, now, EXPRESSION_WINDOW_S, key=lambda e: e.timestamp
        )

    def prune_events(self, now: float):
        """Drop every liveness event that has left its recency window."""
        self.prune_blinks(now)
        self.prune_head_movements(now)
        self.prune_expressions(now)

    def reset(self):
        with self.lock:
            if self.analyzing_timer is not None:
                self.analyzing_timer.cancel()
            self.current_step = VerificationStep.AWAIT_FACE
            self.history.clear()
            self.blink_events = []
            self.head_movement_events = []
            self.expression_events = []
            self.eye_closed_run_length = 0
            self.last_pose = None
            self.face_detection_confidence = 0.0
            self.liveness_score = 0.0
            self.quality_signal = 0.0
            self.identity_confidence = 0.0
            self.reference_descriptor = None
            self.completed_steps = []
            self.multiple_subjects = False
            self.warning = None
            self.analyzing_timer = None
            self.analysis_elapsed = False

    def close(self):
        """End the session. Pending deferred transitions can no longer fire."""
        with self.lock:
            if self.analyzing_timer is not None:
                self.analyzing_timer.cancel()
            self.closed = True
