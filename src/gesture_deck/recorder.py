"""Landmark recording and replay.

Recordings let a gesture session be replayed through the classifier
without a camera, with the original frame timing, so tuning and tests are
deterministic.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

import numpy as np

from gesture_deck.frame import LANDMARK_DIM, NUM_LANDMARKS, HandFrame

if TYPE_CHECKING:
    from gesture_deck.classifier import GestureClassifier, GestureStatus


@dataclass
class RecordedFrame:
    """A single detector tick: time since recording start and the hand, if any."""
    timestamp: float
    hand: Optional[HandFrame]


class FrameRecorder:
    """Records detector output, including ticks where no hand was found.

    Usage:
        recorder = FrameRecorder()
        recorder.start()
        # In your frame loop:
        recorder.add_frame(hand)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._frames = []
        self._start_time = None
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def add_frame(self, hand: Optional[HandFrame], timestamp: Optional[float] = None):
        """Append one tick. Timestamps are stored relative to the first frame."""
        if not self._recording:
            return

        now = timestamp if timestamp is not None else time.monotonic()
        if self._start_time is None:
            self._start_time = now

        self._frames.append(RecordedFrame(timestamp=now - self._start_time, hand=hand))

    def save(self, path: str | Path):
        """Save recording to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": 1,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [
                {
                    "timestamp": f.timestamp,
                    "hand": f.hand.to_dict() if f.hand is not None else None,
                }
                for f in self._frames
            ],
        }

        with open(path, "w") as f:
            json.dump(data, f)

    def save_compact(self, path: str | Path) -> Path:
        """Save in compressed numpy format. Returns the written path."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        n = len(self._frames)
        landmarks = np.zeros((n, NUM_LANDMARKS, LANDMARK_DIM), dtype=np.float32)
        present = np.zeros(n, dtype=bool)
        confidence = np.zeros(n, dtype=np.float32)
        handedness = np.array(
            [f.hand.handedness if f.hand is not None else "" for f in self._frames],
            dtype=str,
        )
        for i, f in enumerate(self._frames):
            if f.hand is not None:
                landmarks[i] = f.hand.landmarks
                present[i] = True
                confidence[i] = f.hand.confidence

        np.savez_compressed(
            path,
            timestamps=np.array([f.timestamp for f in self._frames], dtype=np.float64),
            landmarks=landmarks,
            present=present,
            confidence=confidence,
            handedness=handedness,
        )
        return path


class FramePlayer:
    """Replays a recorded session.

    Usage:
        player = FramePlayer.load("session.json")
        for frame, status in player.feed(GestureClassifier()):
            print(frame.timestamp, status.state)
    """

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> FramePlayer:
        """Load a recording from JSON or compact .npz."""
        path = Path(path)

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        frames = [
            RecordedFrame(timestamp=f["timestamp"], hand=HandFrame.from_dict(f.get("hand")))
            for f in data["frames"]
        ]
        return cls(frames)

    @classmethod
    def _load_compact(cls, path: Path) -> FramePlayer:
        data = np.load(path, allow_pickle=False)
        timestamps = data["timestamps"]
        landmarks = data["landmarks"]
        present = data["present"]
        confidence = data["confidence"]
        handedness = data["handedness"]

        frames = []
        for i in range(len(timestamps)):
            hand = None
            if present[i]:
                hand = HandFrame(
                    landmarks=landmarks[i].astype(np.float32),
                    handedness=str(handedness[i]),
                    confidence=float(confidence[i]),
                )
            frames.append(RecordedFrame(timestamp=float(timestamps[i]), hand=hand))
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def play(self) -> Iterator[RecordedFrame]:
        """Iterate through all frames instantly (no timing)."""
        yield from self._frames

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Replay at original timing (or scaled by speed factor)."""
        if not self._frames:
            return

        start = time.monotonic()
        for frame in self._frames:
            target_time = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield frame

    def feed(
        self, classifier: GestureClassifier
    ) -> Iterator[tuple[RecordedFrame, GestureStatus]]:
        """Push every frame through a classifier using the recorded timestamps."""
        for frame in self._frames:
            yield frame, classifier.process_frame(frame.hand, timestamp=frame.timestamp)
