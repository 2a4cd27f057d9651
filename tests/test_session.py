"""Tests for the camera session lifecycle, using fake capture and detector."""

import numpy as np
import pytest

from gesture_deck.classifier import GestureState
from gesture_deck.config import DeckConfig
from gesture_deck.frame import HandFrame
from gesture_deck.recorder import FrameRecorder
from gesture_deck.session import GestureSession


def make_fist():
    lm = np.zeros((21, 3), dtype=np.float32)
    lm[:, 0] = 0.5
    lm[:, 1] = 0.8
    for tip in [4, 8, 12, 16, 20]:
        lm[tip - 2, 1] = 0.65
        lm[tip, 1] = 0.72
    return HandFrame(landmarks=lm, confidence=0.9)


class FakeCapture:
    def __init__(self, opened=True, frames=None):
        self.opened = opened
        self.frames = frames  # None = unlimited good frames
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if self.frames is not None:
            if self.frames <= 0:
                return False, None
            self.frames -= 1
        return True, np.zeros((4, 4, 3), dtype=np.uint8)

    def release(self):
        self.released = True


class FakeDetector:
    def __init__(self, hand=None):
        self.hand = hand
        self.calls = 0
        self.closed = False

    def detect(self, frame_rgb):
        self.calls += 1
        return self.hand

    def close(self):
        self.closed = True


class TestLifecycle:
    def test_start_and_stop(self):
        capture = FakeCapture()
        session = GestureSession(detector=FakeDetector(), capture_factory=lambda i: capture)
        assert session.start()
        assert session.is_active
        assert session.error is None

        session.stop()
        assert not session.is_active
        assert capture.released
        assert session.classifier.gesture_state == GestureState.WAITING

    def test_camera_failure_sets_error(self):
        session = GestureSession(
            detector=FakeDetector(), capture_factory=lambda i: FakeCapture(opened=False)
        )
        assert not session.start()
        assert not session.is_active
        assert "Could not open camera 0" in session.error

    def test_factory_exception_sets_error(self):
        def denied(index):
            raise PermissionError("camera permission denied")

        session = GestureSession(detector=FakeDetector(), capture_factory=denied)
        assert not session.start()
        assert session.error == "camera permission denied"

    def test_restart_after_failure(self):
        captures = iter([FakeCapture(opened=False), FakeCapture()])
        session = GestureSession(detector=FakeDetector(), capture_factory=lambda i: next(captures))
        assert not session.start()
        assert session.start()
        assert session.error is None

    def test_injected_detector_not_closed(self):
        detector = FakeDetector()
        session = GestureSession(detector=detector, capture_factory=lambda i: FakeCapture())
        session.start()
        session.stop()
        assert not detector.closed
        assert session.detector is detector

    def test_context_manager_stops(self):
        capture = FakeCapture()
        with GestureSession(detector=FakeDetector(), capture_factory=lambda i: capture) as session:
            session.start()
        assert capture.released

    def test_camera_index_from_config(self):
        seen = []
        config = DeckConfig()
        config.camera.index = 3

        def factory(index):
            seen.append(index)
            return FakeCapture()

        GestureSession(config, detector=FakeDetector(), capture_factory=factory).start()
        assert seen == [3]


class TestProcessing:
    def test_process_rgb_feeds_classifier(self):
        session = GestureSession(detector=FakeDetector(make_fist()), capture_factory=lambda i: FakeCapture())
        session.start()
        events = []
        session.classifier.set_handlers(on_pause=lambda: events.append("pause"))

        image = np.zeros((4, 4, 3), dtype=np.uint8)
        for i in range(10):
            status = session.process_rgb(image, timestamp=i / 30)
        assert status.state == GestureState.PAUSED
        assert events == ["pause"]
        assert session.stats.frames == 10
        assert session.stats.detection_rate == 1.0

    def test_process_without_detector(self):
        session = GestureSession(capture_factory=lambda i: FakeCapture())
        with pytest.raises(RuntimeError):
            session.process_rgb(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_run_max_frames(self):
        detector = FakeDetector()
        session = GestureSession(detector=detector, capture_factory=lambda i: FakeCapture())
        session.start()
        assert session.run(max_frames=5) == 5
        assert detector.calls == 5
        assert session.classifier.gesture_state == GestureState.SCANNING

    def test_run_stops_from_handler(self):
        session = GestureSession(detector=FakeDetector(make_fist()), capture_factory=lambda i: FakeCapture())
        session.start()
        session.classifier.set_handlers(on_pause=session.stop)
        assert session.run(max_frames=100) == 10
        assert not session.is_active
        assert session.classifier.gesture_state == GestureState.WAITING

    def test_run_gives_up_on_dead_camera(self):
        session = GestureSession(detector=FakeDetector(), capture_factory=lambda i: FakeCapture(frames=2))
        session.start()
        assert session.run() == 2
        assert not session.is_active
        assert session.error == "Camera stopped delivering frames"
        assert session.stats.read_failures == GestureSession.MAX_READ_FAILURES

    def test_records_frames(self):
        recorder = FrameRecorder()
        session = GestureSession(
            detector=FakeDetector(make_fist()),
            capture_factory=lambda i: FakeCapture(),
            recorder=recorder,
        )
        session.start()
        session.run(max_frames=4)
        session.stop()
        assert recorder.frame_count == 4
        assert not recorder.is_recording
