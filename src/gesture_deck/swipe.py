"""Horizontal swipe detection from palm displacement over a short window.

The detector is fed only once the classifier has committed to the open-hand
category. It measures how far the palm travelled since the window opened
and fires a single directional event when the displacement crosses the
threshold. Timing is wall-clock based, so behaviour does not depend on the
detector's frame rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger("gesture_deck.swipe")


class SwipeDirection(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class SwipeWindow:
    """Transient displacement-measurement state (seconds)."""
    start_x: Optional[float] = None
    start_time: float = 0.0
    last_swipe_time: Optional[float] = None


class SwipeDetector:
    """Windowed displacement detector with cooldown.

    Args:
        threshold: Minimum |dx| in normalized width to count as a swipe.
        window: Seconds after which an incomplete swipe is considered stale
            and measurement restarts from the current position.
        cooldown: Minimum seconds between two emitted swipes.
    """

    def __init__(self, threshold: float = 0.15, window: float = 0.5, cooldown: float = 0.6):
        self.threshold = threshold
        self.window = window
        self.cooldown = cooldown
        self._state = SwipeWindow()

    @property
    def state(self) -> SwipeWindow:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.start_x is not None

    def update(self, x: float, now: float) -> Optional[SwipeDirection]:
        """Feed one palm x-coordinate at time `now`; return a direction or None."""
        s = self._state

        if s.start_x is None:
            s.start_x = x
            s.start_time = now
            return None

        # Hand held still too long: measure from here instead
        if now - s.start_time > self.window:
            s.start_x = x
            s.start_time = now
            return None

        if s.last_swipe_time is not None and now - s.last_swipe_time < self.cooldown:
            return None

        dx = x - s.start_x
        if abs(dx) > self.threshold:
            s.last_swipe_time = now
            s.start_x = None
            direction = SwipeDirection.RIGHT if dx > 0 else SwipeDirection.LEFT
            logger.debug("Swipe %s (dx=%.3f)", direction.value, dx)
            return direction

        return None

    def clear(self):
        """Close the measurement window; the cooldown clock is kept."""
        self._state.start_x = None

    def reset(self):
        """Forget everything, including the last swipe time."""
        self._state = SwipeWindow()
