"""Tests for the MediaPipe landmark source and the HandFrame type."""

from types import SimpleNamespace

import numpy as np
import pytest

from gesture_deck import detector as detector_module
from gesture_deck.config import CameraConfig
from gesture_deck.detector import HandDetector
from gesture_deck.frame import HandFrame


def fake_results(points=None, label="Left", score=0.93):
    if points is None:
        return SimpleNamespace(multi_hand_landmarks=None, multi_handedness=None)
    landmark = [SimpleNamespace(x=x, y=y, z=z) for x, y, z in points]
    category = SimpleNamespace(label=label, score=score)
    return SimpleNamespace(
        multi_hand_landmarks=[SimpleNamespace(landmark=landmark)],
        multi_handedness=[SimpleNamespace(classification=[category])],
    )


class FakeHands:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.results = fake_results()
        self.closed = False
        FakeHands.instances.append(self)

    def process(self, frame_rgb):
        return self.results

    def close(self):
        self.closed = True


@pytest.fixture
def fake_mp(monkeypatch):
    FakeHands.instances = []
    mp = SimpleNamespace(solutions=SimpleNamespace(hands=SimpleNamespace(Hands=FakeHands)))
    monkeypatch.setattr(detector_module, "mp", mp)
    return mp


class TestHandDetector:
    def test_requires_mediapipe(self, monkeypatch):
        monkeypatch.setattr(detector_module, "mp", None)
        with pytest.raises(ImportError):
            HandDetector()

    def test_passes_camera_settings(self, fake_mp):
        HandDetector(CameraConfig(min_detection_confidence=0.8))
        kwargs = FakeHands.instances[-1].kwargs
        assert kwargs["max_num_hands"] == 1
        assert kwargs["model_complexity"] == 1
        assert kwargs["min_detection_confidence"] == 0.8
        assert kwargs["min_tracking_confidence"] == 0.65

    def test_no_hand_returns_none(self, fake_mp):
        det = HandDetector()
        assert det.detect(np.zeros((4, 4, 3), dtype=np.uint8)) is None

    def test_converts_landmarks(self, fake_mp):
        det = HandDetector()
        points = [(i / 21, 1 - i / 21, -0.01 * i) for i in range(21)]
        FakeHands.instances[-1].results = fake_results(points)

        hand = det.detect(np.zeros((4, 4, 3), dtype=np.uint8))
        assert hand.landmarks.shape == (21, 3)
        assert hand.landmarks.dtype == np.float32
        assert hand.handedness == "Left"
        assert hand.confidence == pytest.approx(0.93)
        np.testing.assert_allclose(hand.landmarks[8], points[8], atol=1e-6)

    def test_context_manager_closes(self, fake_mp):
        with HandDetector():
            pass
        assert FakeHands.instances[-1].closed


class TestHandFrame:
    def test_valid(self):
        assert HandFrame(np.zeros((21, 3), dtype=np.float32)).is_valid()

    def test_wrong_shape_invalid(self):
        assert not HandFrame(np.zeros((20, 3), dtype=np.float32)).is_valid()
        assert not HandFrame(np.zeros(63, dtype=np.float32)).is_valid()

    def test_non_finite_invalid(self):
        lm = np.zeros((21, 3), dtype=np.float32)
        lm[5, 1] = np.inf
        assert not HandFrame(lm).is_valid()

    def test_non_numeric_invalid(self):
        assert not HandFrame(np.full((21, 3), None, dtype=object)).is_valid()
        assert not HandFrame(np.full((21, 3), "x")).is_valid()

    def test_nan_depth_still_valid(self):
        lm = np.zeros((21, 3), dtype=np.float32)
        lm[:, 2] = np.nan
        assert HandFrame(lm).is_valid()

    def test_palm_and_index_tip(self):
        lm = np.zeros((21, 3), dtype=np.float32)
        lm[9] = [0.25, 0.5, 0.0]
        lm[8] = [0.6, 0.3, 0.0]
        frame = HandFrame(lm)
        assert frame.palm_x == pytest.approx(0.25)
        assert frame.index_tip == pytest.approx((0.6, 0.3))

    def test_dict_roundtrip(self):
        lm = np.random.RandomState(0).rand(21, 3).astype(np.float32)
        frame = HandFrame.from_dict(HandFrame(lm, "Left", 0.5).to_dict())
        assert frame.handedness == "Left"
        np.testing.assert_allclose(frame.landmarks, lm, atol=1e-6)
        assert HandFrame.from_dict(None) is None
