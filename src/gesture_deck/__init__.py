"""gesture-deck - Debounced hand-gesture control events for presentations."""

__version__ = "0.1.0"

from gesture_deck.frame import HandFrame
from gesture_deck.fingers import FingerExtensionExtractor, FingerVector
from gesture_deck.swipe import SwipeDetector, SwipeDirection, SwipeWindow
from gesture_deck.pointer import PointerTracker, PointerState
from gesture_deck.classifier import GestureClassifier, GestureState, GestureStatus
from gesture_deck.config import ClassifierConfig, CameraConfig, DeckConfig
from gesture_deck.detector import HandDetector
from gesture_deck.recorder import FrameRecorder, FramePlayer, RecordedFrame
from gesture_deck.session import GestureSession
