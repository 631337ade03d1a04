import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

# Step gating
FACE_CONFIDENCE = float(os.getenv("FACE_CONFIDENCE", "0.5"))
LIVENESS_THRESHOLD = float(os.getenv("LIVENESS_THRESHOLD", "0.4"))
IDENTITY_THRESHOLD = float(os.getenv("IDENTITY_THRESHOLD", "0.6"))
IDENTITY_GATING = os.getenv("IDENTITY_GATING", "informational")

# Stricter values the deployed thresholds were lowered from
RECOMMENDED_FACE_CONFIDENCE = 0.8
RECOMMENDED_LIVENESS_THRESHOLD = 0.75
RECOMMENDED_IDENTITY_THRESHOLD = 0.6

# Blink detection (face-api 6-point eye contours)
EAR_THRESHOLD = float(os.getenv("EAR_THRESHOLD", "0.25"))
BLINK_RUN_MIN = int(os.getenv("BLINK_RUN_MIN", "1"))
BLINK_RUN_MAX = int(os.getenv("BLINK_RUN_MAX", "15"))
BLINKS_REQUIRED = int(os.getenv("BLINKS_REQUIRED", "2"))
BLINK_WINDOW_S = 15.0

# Head movement
MOVEMENT_ANGLE_DEG = float(os.getenv("MOVEMENT_ANGLE_DEG", "2.0"))
MOVEMENTS_REQUIRED = int(os.getenv("MOVEMENTS_REQUIRED", "1"))
# Wrap yaw/pitch deltas into [0, 180]; off means the literal absolute difference
WRAP_HEAD_ANGLES = os.getenv("WRAP_HEAD_ANGLES", "false").lower() in ("1", "true", "yes")
MOVEMENT_WINDOW_S = 20.0

# Head pose anchors (indices into each landmark group)
LEFT_EYE_CORNER = 0
RIGHT_EYE_CORNER = 3
NOSE_TOP = 0
NOSE_BOTTOM = 6
MOUTH_TOP = 0

# Expressions
EXPRESSION_CONFIDENCE = float(os.getenv("EXPRESSION_CONFIDENCE", "0.4"))
EXPRESSION_STRONG_CONFIDENCE = float(os.getenv("EXPRESSION_STRONG_CONFIDENCE", "0.6"))
PRIVILEGED_EXPRESSIONS = tuple(
    label.strip() for label in os.getenv("PRIVILEGED_EXPRESSIONS", "happy,surprised").split(",") if label.strip()
)
EXPRESSION_WINDOW_S = 15.0

# Liveness score weights
LIVENESS_BLINK_WEIGHT_FULL = 0.30
LIVENESS_BLINK_WEIGHT_PARTIAL = 0.20
LIVENESS_MOVEMENT_WEIGHT = 0.30
LIVENESS_EXPRESSION_WEIGHT = 0.20
LIVENESS_QUALITY_WEIGHT = 0.20

# Stubbed texture-consistency signal range
QUALITY_SIGNAL_MIN = 0.7
QUALITY_SIGNAL_MAX = 1.0

# Identity
DESCRIPTOR_SIZE = 128
REFERENCE_CAPTURE_HISTORY_MIN = int(os.getenv("REFERENCE_CAPTURE_HISTORY_MIN", "10"))
HISTORY_SIZE = 30

# Simulated backend biometric check
ANALYZING_DELAY_S = float(os.getenv("ANALYZING_DELAY_S", "3.0"))

# Server
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
FRAME_POLL_INTERVAL_S = 0.01
