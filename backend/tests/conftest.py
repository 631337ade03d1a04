"""
Shared fixtures: synthetic face-api style observations and a session driven by a fake clock.
"""
import pytest

from processing.pipeline import process_frame
from processing.quality import ConstantQualitySignal
from schemas.observation import FrameObservation, Point
from state.session import SessionState

DESCRIPTOR_SIZE = 128

NEUTRAL_EXPRESSIONS = {"neutral": 0.3, "happy": 0.2, "sad": 0.2, "surprised": 0.3}
HAPPY_EXPRESSIONS = {"neutral": 0.05, "happy": 0.9, "sad": 0.0, "surprised": 0.05}

OPEN_EAR = 0.3
CLOSED_EAR = 0.1


def build_eye(origin_x, origin_y, ear, width=10.0):
    """Six-point eye contour whose Eye Aspect Ratio is exactly ``ear``."""
    half = ear * width / 2.0
    return [
        Point(x=origin_x, y=origin_y),
        Point(x=origin_x + width / 3, y=origin_y - half),
        Point(x=origin_x + 2 * width / 3, y=origin_y - half),
        Point(x=origin_x + width, y=origin_y),
        Point(x=origin_x + 2 * width / 3, y=origin_y + half),
        Point(x=origin_x + width / 3, y=origin_y + half),
    ]


def build_observation(
    ear=OPEN_EAR,
    confidence=0.9,
    nose_shift=0.0,
    expressions=None,
    descriptor=None,
    timestamp=0.0,
):
    # Eye centre sits at (50, 40); nose[0]/nose[6] straddle x=50+nose_shift
    nose = [Point(x=50.0 + nose_shift, y=45.0 + i * 2.5) for i in range(9)]
    mouth = [Point(x=40.0 + i, y=75.0) for i in range(20)]
    return FrameObservation(
        timestamp=timestamp,
        detection_confidence=confidence,
        eye_landmarks_left=build_eye(30.0, 40.0, ear),
        eye_landmarks_right=build_eye(60.0, 40.0, ear),
        nose_landmarks=nose,
        mouth_landmarks=mouth,
        descriptor=list(descriptor) if descriptor is not None else [0.0] * DESCRIPTOR_SIZE,
        expressions=dict(expressions if expressions is not None else NEUTRAL_EXPRESSIONS),
    )


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FrameDriver:
    """Feeds observations into a session, advancing the fake clock by one frame each time."""

    def __init__(self, session, clock, frame_interval=0.1):
        self.session = session
        self.clock = clock
        self.frame_interval = frame_interval

    def feed_many(self, observations):
        result = process_frame(observations, self.session)
        self.clock.advance(self.frame_interval)
        return result

    def feed(self, **kwargs):
        return self.feed_many([build_observation(**kwargs)])

    def blink(self, closed_frames=3, **kwargs):
        for _ in range(closed_frames):
            self.feed(ear=CLOSED_EAR, **kwargs)
        return self.feed(ear=OPEN_EAR, **kwargs)

    def run_challenges(self, descriptor_after_reference=None):
        """Face, two blinks, a head turn, a smile and a gaze frame: ends in ANALYZING.

        The reference descriptor is captured on the tenth frame (the head turn);
        later frames use ``descriptor_after_reference`` when given.
        """
        self.feed()
        self.blink()
        self.blink()
        self.feed(nose_shift=6.0)
        self.feed(expressions=HAPPY_EXPRESSIONS, descriptor=descriptor_after_reference)
        return self.feed(descriptor=descriptor_after_reference)


@pytest.fixture
def make_observation():
    return build_observation


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return SessionState(
        quality_provider=ConstantQualitySignal(1.0),
        clock=clock,
        analyzing_delay_s=3.0,
    )


@pytest.fixture
def driver(session, clock):
    return FrameDriver(session, clock)
