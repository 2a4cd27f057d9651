"""Gesture state machine: landmark frames in, presentation control events out.

Each frame is sorted into a raw category by its extended-finger count:

- fist (0 fingers)       → pause
- open hand (4+ fingers) → swipe navigation
- anything else (1-3)    → ready, with single-index pointing as a pointer

A category only takes effect after it has been seen on several consecutive
frames, which hides single-frame misclassifications from the consumer. Pause
needs the longest run because it stops navigation; swipe and ready are the
primary interactions and commit faster.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from gesture_deck.config import ClassifierConfig
from gesture_deck.fingers import FingerExtensionExtractor, FingerVector
from gesture_deck.frame import HandFrame
from gesture_deck.pointer import PointerState, PointerTracker
from gesture_deck.swipe import SwipeDetector, SwipeDirection

logger = logging.getLogger("gesture_deck.classifier")

Handler = Optional[Callable[[], None]]


class GestureState(Enum):
    WAITING = "WAITING"
    SCANNING = "SCANNING"
    PAUSED = "PAUSED"
    STABILIZING = "STABILIZING"
    READY = "READY"
    SWIPE_READY = "SWIPE_READY"
    SWIPE_LEFT = "SWIPE_LEFT"
    SWIPE_RIGHT = "SWIPE_RIGHT"


@dataclass(frozen=True)
class GestureStatus:
    """Observable classifier output for the current frame."""
    state: GestureState = GestureState.WAITING
    finger_count: int = 0
    confidence: float = 0.0


class GestureClassifier:
    """Turns a stream of hand frames into debounced gesture states and events.

    Feed one frame per detector tick with :meth:`process_frame` (``None``
    when no hand was found). Swipe and pause callbacks are edge triggered:
    each fires once per qualifying transition, after the new state has been
    applied, so a callback may call :meth:`reset`.

    Timing windows (transition delay, swipe window, swipe cooldown) use
    wall-clock seconds from ``clock`` unless a timestamp is passed
    explicitly; the pointer dropout budget counts frames.
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        on_swipe_left: Handler = None,
        on_swipe_right: Handler = None,
        on_pause: Handler = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or ClassifierConfig()
        self.config.validate()
        self._clock = clock

        self._extractor = FingerExtensionExtractor(
            thumb_margin=self.config.thumb_margin,
            finger_margin=self.config.finger_margin,
        )
        self._swipe = SwipeDetector(
            threshold=self.config.swipe_threshold,
            window=self.config.swipe_window,
            cooldown=self.config.swipe_cooldown,
        )
        self._pointer = PointerTracker(
            smoothing=self.config.smoothing,
            roi_min=self.config.roi_min,
            roi_max=self.config.roi_max,
            dropout_frames=self.config.pointer_dropout_frames,
            mirror_x=self.config.mirror_pointer,
        )

        self._on_swipe_left: Handler = None
        self._on_swipe_right: Handler = None
        self._on_pause: Handler = None
        self.set_handlers(on_swipe_left, on_swipe_right, on_pause)

        self.reset()

    def set_handlers(
        self,
        on_swipe_left: Handler = None,
        on_swipe_right: Handler = None,
        on_pause: Handler = None,
    ):
        """Replace the event handlers. ``None`` clears a handler."""
        self._on_swipe_left = on_swipe_left
        self._on_swipe_right = on_swipe_right
        self._on_pause = on_pause

    def reset(self):
        """Return to WAITING with all counters, windows and pointer cleared."""
        self._status = GestureStatus()
        self.consecutive_fist = 0
        self.consecutive_ready = 0
        self.consecutive_swipe = 0
        self._last_fist_time: Optional[float] = None
        self._last_open_time: Optional[float] = None
        self._last_fingers: Optional[FingerVector] = None
        self._swipe.reset()
        self._pointer.reset()

    # --- observables ---

    @property
    def status(self) -> GestureStatus:
        return self._status

    @property
    def gesture_state(self) -> GestureState:
        return self._status.state

    @property
    def finger_count(self) -> int:
        return self._status.finger_count

    @property
    def confidence(self) -> float:
        return self._status.confidence

    @property
    def pointer_state(self) -> PointerState:
        return self._pointer.state

    @property
    def fingers(self) -> Optional[FingerVector]:
        """Extension vector of the last hand-present frame."""
        return self._last_fingers

    @property
    def swipe_window_open(self) -> bool:
        return self._swipe.is_open

    # --- frame processing ---

    def process_frame(
        self, frame: Optional[HandFrame], timestamp: Optional[float] = None
    ) -> GestureStatus:
        """Advance the state machine by one detector tick.

        Args:
            frame: The detected hand, or None if no hand was found.
                Malformed frames are treated as no hand.
            timestamp: Frame time in seconds. Defaults to ``clock()``.

        Returns:
            The observable status after this frame.
        """
        now = timestamp if timestamp is not None else self._clock()

        if frame is None or not frame.is_valid():
            self._handle_no_hand()
            return self._status

        fingers = self._extractor.extract(frame.landmarks)
        self._last_fingers = fingers
        total = fingers.total

        committed = False
        if total == 0:
            self._handle_fist(frame, total, now)
        elif total >= self.config.open_min_fingers:
            committed = self._handle_open(frame, total, now)
        else:
            self._handle_ready(frame, fingers, now)

        # Swipe measurement only accumulates across committed open-hand frames
        if not committed:
            self._swipe.clear()

        return self._status

    def _handle_no_hand(self):
        # Short detection dropouts keep the previous state to avoid flicker
        if self._pointer.tolerate_dropout():
            return

        self.consecutive_fist = 0
        self.consecutive_ready = 0
        self.consecutive_swipe = 0
        self._swipe.clear()
        self._pointer.deactivate()
        self._set_status(GestureState.SCANNING, 0, 0.0)

    def _handle_fist(self, frame: HandFrame, total: int, now: float):
        self.consecutive_fist += 1
        self.consecutive_ready = 0
        self.consecutive_swipe = 0

        if self.consecutive_fist < self.config.fist_frames:
            return

        entering = self._status.state != GestureState.PAUSED
        self._set_status(GestureState.PAUSED, total, frame.confidence)
        self._pointer.deactivate()
        if entering:
            self._last_fist_time = now
            logger.info("Pause gesture (confidence=%.2f)", frame.confidence)
            self._emit(self._on_pause)

    def _handle_open(self, frame: HandFrame, total: int, now: float) -> bool:
        self.consecutive_swipe += 1
        self.consecutive_fist = 0
        self.consecutive_ready = 0

        if self.consecutive_swipe < self.config.open_frames:
            return False

        self._last_open_time = now
        direction = self._swipe.update(frame.palm_x, now)

        self._pointer.deactivate()
        if direction is None:
            self._set_status(GestureState.SWIPE_READY, total, frame.confidence)
            return True

        if self.config.mirror_swipe:
            direction = (
                SwipeDirection.LEFT if direction == SwipeDirection.RIGHT
                else SwipeDirection.RIGHT
            )
        logger.info("Swipe %s (confidence=%.2f)", direction.value, frame.confidence)
        if direction == SwipeDirection.RIGHT:
            self._set_status(GestureState.SWIPE_RIGHT, total, frame.confidence)
            self._emit(self._on_swipe_right)
        else:
            self._set_status(GestureState.SWIPE_LEFT, total, frame.confidence)
            self._emit(self._on_swipe_left)
        return True

    def _handle_ready(self, frame: HandFrame, fingers: FingerVector, now: float):
        self.consecutive_fist = 0
        self.consecutive_swipe = 0
        total = fingers.total

        # Hands opening or closing pass through 1-3 fingers briefly
        delay = self.config.transition_delay
        fist_delay_ok = self._last_fist_time is None or now - self._last_fist_time > delay
        open_delay_ok = self._last_open_time is None or now - self._last_open_time > delay

        if fist_delay_ok and open_delay_ok:
            self.consecutive_ready += 1
            if self.consecutive_ready >= self.config.ready_frames:
                self._set_status(GestureState.READY, total, frame.confidence)
                if fingers.index_only:
                    self._pointer.track(*frame.index_tip)
                else:
                    self._pointer.release()
                return

        self._set_status(GestureState.STABILIZING, total, frame.confidence)
        self._pointer.deactivate()

    def _set_status(self, state: GestureState, finger_count: int, confidence: float):
        if state != self._status.state:
            logger.debug("%s -> %s", self._status.state.value, state.value)
        self._status = GestureStatus(state, finger_count, float(confidence))

    @staticmethod
    def _emit(handler: Handler):
        if handler is not None:
            handler()
