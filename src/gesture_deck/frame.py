"""Landmark frame type shared by the detector, classifier and recorder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

NUM_LANDMARKS = 21
LANDMARK_DIM = 3  # x, y, z

# Stable interior point used for palm position
PALM_CENTER = MIDDLE_MCP


@dataclass(eq=False)
class HandFrame:
    """One detected hand: 21 landmarks plus handedness and detection score.

    Landmarks are (x, y, z) with x and y normalized to [0, 1] relative to
    the image. Depth (z) is carried along but not used for classification.
    """
    landmarks: np.ndarray  # shape (21, 3)
    handedness: str = "Right"
    confidence: float = 1.0

    def is_valid(self) -> bool:
        """True when landmarks are numeric, have the expected shape and are all finite."""
        lm = self.landmarks
        if not isinstance(lm, np.ndarray):
            return False
        if lm.ndim != 2 or lm.shape[0] != NUM_LANDMARKS or lm.shape[1] < 2:
            return False
        if not np.issubdtype(lm.dtype, np.number):
            return False
        return bool(np.all(np.isfinite(lm[:, :2])))

    @property
    def palm_x(self) -> float:
        return float(self.landmarks[PALM_CENTER, 0])

    @property
    def index_tip(self) -> tuple[float, float]:
        tip = self.landmarks[INDEX_TIP]
        return float(tip[0]), float(tip[1])

    def to_dict(self) -> dict:
        return {
            "landmarks": self.landmarks.tolist(),
            "handedness": self.handedness,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional[HandFrame]:
        if not data:
            return None
        return cls(
            landmarks=np.array(data["landmarks"], dtype=np.float32),
            handedness=data.get("handedness", "Right"),
            confidence=float(data.get("confidence", 1.0)),
        )
