"""Index-finger pointer: ROI remap, EMA smoothing and dropout tolerance."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PointerState:
    """Last known smoothed pointer position in screen space."""
    x: float = 0.0
    y: float = 0.0
    active: bool = False


class PointerTracker:
    """Maps raw fingertip coordinates to a smoothed screen pointer.

    Only the central part of the camera field (``roi_min``..``roi_max`` on
    each axis) is used and stretched to the full [0, 1] output, so screen
    corners are reachable without moving to the edge of the frame. The
    x-axis is mirrored to match a user pointing at the screen.

    When the pointing gesture is briefly lost the tracker keeps reporting
    the last position as active for up to ``dropout_frames`` frames. This
    budget counts frames, not seconds, so it scales with detector cadence.
    """

    def __init__(
        self,
        smoothing: float = 0.25,
        roi_min: float = 0.15,
        roi_max: float = 0.85,
        dropout_frames: int = 20,
        mirror_x: bool = True,
    ):
        self.smoothing = smoothing
        self.roi_min = roi_min
        self.roi_max = roi_max
        self.dropout_frames = dropout_frames
        self.mirror_x = mirror_x
        self._state = PointerState()
        self._dropout = 0

    @property
    def state(self) -> PointerState:
        return PointerState(self._state.x, self._state.y, self._state.active)

    @property
    def dropout_remaining(self) -> int:
        return self._dropout

    def map_roi(self, value: float) -> float:
        """Linearly remap the ROI to [0, 1], clamped."""
        span = self.roi_max - self.roi_min
        return max(0.0, min(1.0, (value - self.roi_min) / span))

    def track(self, raw_x: float, raw_y: float) -> PointerState:
        """Feed a raw fingertip position and re-arm the dropout budget."""
        target_x = self.map_roi(raw_x)
        if self.mirror_x:
            target_x = 1.0 - target_x
        target_y = self.map_roi(raw_y)

        a = self.smoothing
        self._state = PointerState(
            x=a * target_x + (1.0 - a) * self._state.x,
            y=a * target_y + (1.0 - a) * self._state.y,
            active=True,
        )
        self._dropout = self.dropout_frames
        return self.state

    def tolerate_dropout(self) -> bool:
        """Spend one frame of dropout budget. False once it is exhausted."""
        if self._dropout > 0:
            self._dropout -= 1
            return True
        return False

    def release(self) -> PointerState:
        """Pointer gesture not seen this frame; go inactive once the budget runs out."""
        if not self.tolerate_dropout():
            self._state.active = False
        return self.state

    def deactivate(self) -> PointerState:
        self._state.active = False
        return self.state

    def reset(self):
        self._state = PointerState()
        self._dropout = 0
