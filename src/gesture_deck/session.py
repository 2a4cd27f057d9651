"""Camera session: capture → MediaPipe landmarks → gesture classifier.

The session owns the camera and detector lifecycle around a single
GestureClassifier. Start-up failures (no camera, missing model) are not
raised; they are logged and kept as one opaque message in ``error`` so a UI
can show them and offer a retry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from gesture_deck.classifier import GestureClassifier, GestureStatus
from gesture_deck.config import DeckConfig
from gesture_deck.detector import HandDetector
from gesture_deck.recorder import FrameRecorder

logger = logging.getLogger("gesture_deck.session")

CaptureFactory = Callable[[int], Any]


@dataclass
class SessionStats:
    """Runtime counters for the current session."""
    frames: int = 0
    hands: int = 0
    read_failures: int = 0

    @property
    def detection_rate(self) -> float:
        return self.hands / self.frames if self.frames else 0.0


class GestureSession:
    """Drives a GestureClassifier from a live camera.

    Usage:
        session = GestureSession(DeckConfig())
        session.classifier.set_handlers(on_swipe_right=deck.next_slide)
        if session.start():
            session.run()
        else:
            print(session.error)
    """

    MAX_READ_FAILURES = 30

    def __init__(
        self,
        config: Optional[DeckConfig] = None,
        detector: Optional[HandDetector] = None,
        classifier: Optional[GestureClassifier] = None,
        capture_factory: Optional[CaptureFactory] = None,
        recorder: Optional[FrameRecorder] = None,
    ):
        self.config = config or DeckConfig()
        self.classifier = classifier or GestureClassifier(self.config.classifier)
        self.detector = detector
        self.recorder = recorder
        self._owns_detector = detector is None
        self._capture_factory = capture_factory
        self._capture = None
        self._active = False
        self.error: Optional[str] = None
        self.stats = SessionStats()

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> bool:
        """Open the camera and detector. Returns False and sets ``error`` on failure."""
        if self._active:
            return True

        self.error = None
        try:
            if self.detector is None:
                self.detector = HandDetector(self.config.camera)
            self._capture = self._open_capture()
        except Exception as e:
            logger.error("Failed to start gesture detection: %s", e)
            self.error = str(e) or "Failed to access camera"
            self._release()
            return False

        self.classifier.reset()
        self.stats = SessionStats()
        if self.recorder is not None:
            self.recorder.start()
        self._active = True
        logger.info("Gesture session started on camera %d", self.config.camera.index)
        return True

    def stop(self):
        """Release the camera and detector and return the classifier to WAITING."""
        was_active = self._active
        self._active = False
        self._release()
        self.classifier.reset()
        if self.recorder is not None and self.recorder.is_recording:
            self.recorder.stop()
        if was_active:
            logger.info(
                "Gesture session stopped after %d frames (detection rate %.0f%%)",
                self.stats.frames, self.stats.detection_rate * 100,
            )

    def process_rgb(self, frame_rgb: np.ndarray, timestamp: Optional[float] = None) -> GestureStatus:
        """Run detection and classification on one RGB image."""
        if self.detector is None:
            raise RuntimeError("session has no detector; call start() first")

        now = timestamp if timestamp is not None else time.monotonic()
        hand = self.detector.detect(frame_rgb)

        self.stats.frames += 1
        if hand is not None:
            self.stats.hands += 1
        if self.recorder is not None:
            self.recorder.add_frame(hand, timestamp=now)

        return self.classifier.process_frame(hand, timestamp=now)

    def run(self, max_frames: Optional[int] = None) -> int:
        """Blocking capture loop. Returns the number of frames processed.

        Ends when :meth:`stop` is called (e.g. from a handler), after
        ``max_frames`` frames, or when the camera stops delivering frames.
        """
        import cv2

        processed = 0
        failures = 0
        while self._active:
            if max_frames is not None and processed >= max_frames:
                break

            ret, frame = self._capture.read()
            if not ret:
                failures += 1
                self.stats.read_failures += 1
                if failures >= self.MAX_READ_FAILURES:
                    logger.error("Camera stopped delivering frames")
                    self.error = "Camera stopped delivering frames"
                    self.stop()
                continue
            failures = 0

            frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            self.process_rgb(frame_rgb)
            processed += 1

        return processed

    def _open_capture(self):
        camera = self.config.camera
        if self._capture_factory is not None:
            cap = self._capture_factory(camera.index)
        else:
            import cv2
            cap = cv2.VideoCapture(camera.index)
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera.width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera.height)

        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"Could not open camera {camera.index}")
        return cap

    def _release(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        if self._owns_detector and self.detector is not None:
            self.detector.close()
            self.detector = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.stop()
