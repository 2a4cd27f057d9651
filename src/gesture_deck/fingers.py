"""Finger extension extraction from raw hand landmarks."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from gesture_deck.frame import (
    INDEX_PIP, INDEX_TIP, MIDDLE_PIP, MIDDLE_TIP, PINKY_PIP, PINKY_TIP,
    RING_PIP, RING_TIP, THUMB_IP, THUMB_TIP, WRIST,
)


class FingerVector(NamedTuple):
    """Per-frame extension flags, thumb first."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    @property
    def total(self) -> int:
        return sum(1 for extended in self if extended)

    @property
    def index_only(self) -> bool:
        return self.total == 1 and self.index


class FingerExtensionExtractor:
    """Decides which fingers are extended in a single frame.

    A finger is extended when its tip lies farther from the wrist than its
    reference joint (IP for the thumb, PIP for the others), plus a small
    margin that absorbs landmark noise. Comparing distances from the wrist
    rather than vertical positions keeps the test valid for any hand
    orientation.

    Distances are measured in the x/y image plane; depth is too noisy on a
    webcam to help.
    """

    _FINGER_TIPS = [THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]
    _FINGER_REFS = [THUMB_IP, INDEX_PIP, MIDDLE_PIP, RING_PIP, PINKY_PIP]

    def __init__(self, thumb_margin: float = 0.01, finger_margin: float = 0.015):
        self.thumb_margin = thumb_margin
        self.finger_margin = finger_margin

    def extract(self, landmarks: np.ndarray) -> FingerVector:
        """Return the extension vector for landmarks of shape (21, 2+)."""
        points = np.asarray(landmarks, dtype=np.float32)[:, :2]
        wrist = points[WRIST]

        flags = []
        for finger, (tip_idx, ref_idx) in enumerate(zip(self._FINGER_TIPS, self._FINGER_REFS)):
            tip_dist = np.linalg.norm(points[tip_idx] - wrist)
            ref_dist = np.linalg.norm(points[ref_idx] - wrist)
            margin = self.thumb_margin if finger == 0 else self.finger_margin
            flags.append(bool(tip_dist > ref_dist + margin))

        return FingerVector(*flags)
