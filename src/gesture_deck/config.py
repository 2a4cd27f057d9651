"""Configuration for the classifier and camera session, stored as YAML.

Example ``deck.yml``:

    classifier:
      fist_frames: 10
      swipe_threshold: 0.15
    camera:
      index: 0
      width: 1280
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger("gesture_deck.config")


@dataclass
class ClassifierConfig:
    """Thresholds for finger extraction, hysteresis, swipe and pointer.

    Durations are seconds of wall-clock time; ``*_frames`` values count
    processed frames.
    """
    # Finger extraction margins (normalized units)
    thumb_margin: float = 0.01
    finger_margin: float = 0.015

    # Hysteresis: consecutive frames before a category commits
    fist_frames: int = 10
    open_frames: int = 4
    ready_frames: int = 3
    open_min_fingers: int = 4

    # Pointer/ready path stays locked this long after a fist or open hand
    transition_delay: float = 0.3

    # Swipe
    swipe_threshold: float = 0.15
    swipe_window: float = 0.5
    swipe_cooldown: float = 0.6
    mirror_swipe: bool = False

    # Pointer
    roi_min: float = 0.15
    roi_max: float = 0.85
    smoothing: float = 0.25
    pointer_dropout_frames: int = 20
    mirror_pointer: bool = True

    def validate(self):
        """Raise ValueError if any value is unusable."""
        if not 0.0 <= self.roi_min < self.roi_max <= 1.0:
            raise ValueError(
                f"roi bounds must satisfy 0 <= roi_min < roi_max <= 1, "
                f"got {self.roi_min}..{self.roi_max}"
            )
        if not 0.0 < self.smoothing <= 1.0:
            raise ValueError(f"smoothing must be in (0, 1], got {self.smoothing}")
        for name in ("fist_frames", "open_frames", "ready_frames"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if not 1 <= self.open_min_fingers <= 5:
            raise ValueError("open_min_fingers must be between 1 and 5")
        if self.pointer_dropout_frames < 0:
            raise ValueError("pointer_dropout_frames must be >= 0")
        for name in ("transition_delay", "swipe_threshold", "swipe_window", "swipe_cooldown"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")


@dataclass
class CameraConfig:
    """Camera and MediaPipe detector settings."""
    index: int = 0
    width: int = 1280
    height: int = 720
    max_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.65


def _build(cls, data: dict | None, section: str):
    """Instantiate a config dataclass, ignoring unknown keys."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    for key in data:
        if key not in known:
            logger.warning("Ignoring unknown %s config key: %s", section, key)
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class DeckConfig:
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)

    def to_dict(self) -> dict:
        return {"classifier": asdict(self.classifier), "camera": asdict(self.camera)}

    @classmethod
    def from_dict(cls, data: dict) -> DeckConfig:
        config = cls(
            classifier=_build(ClassifierConfig, data.get("classifier"), "classifier"),
            camera=_build(CameraConfig, data.get("camera"), "camera"),
        )
        config.classifier.validate()
        return config

    @classmethod
    def from_yaml(cls, path: str | Path) -> DeckConfig:
        """Load configuration from a YAML file. Missing keys keep defaults."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        logger.debug("Loaded config from %s", path)
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path | None = None) -> str:
        """Serialize to YAML; also write to `path` when given."""
        text = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        if path is not None:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return text
