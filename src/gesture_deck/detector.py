"""Hand landmark source backed by MediaPipe Hands."""

from __future__ import annotations

from typing import Optional

import numpy as np

from gesture_deck.config import CameraConfig
from gesture_deck.frame import HandFrame

try:
    import mediapipe as mp
except ImportError:
    mp = None


class HandDetector:
    """Extracts one hand's 21 landmarks per RGB frame using MediaPipe Hands.

    Landmarks are (x, y, z) with x, y normalized to [0, 1] of the image.
    Only the first detected hand is reported; the classifier drives a single
    presenter.
    """

    def __init__(self, config: Optional[CameraConfig] = None, static_image_mode: bool = False):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install mediapipe"
            )

        self.config = config or CameraConfig()
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=static_image_mode,
            max_num_hands=self.config.max_hands,
            model_complexity=self.config.model_complexity,
            min_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray) -> Optional[HandFrame]:
        """Detect a hand in an RGB image (H, W, 3), uint8.

        Returns:
            A HandFrame, or None when no hand is visible.
        """
        results = self._hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return None

        hand_landmarks = results.multi_hand_landmarks[0]
        landmarks = np.array(
            [[lm.x, lm.y, lm.z] for lm in hand_landmarks.landmark],
            dtype=np.float32,
        )

        handedness = "Right"
        confidence = 0.0
        if results.multi_handedness:
            category = results.multi_handedness[0].classification[0]
            handedness = category.label
            confidence = float(category.score)

        return HandFrame(landmarks=landmarks, handedness=handedness, confidence=confidence)

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
