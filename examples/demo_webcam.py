#!/usr/bin/env python3
"""Live webcam demo: a fake slide counter driven by hand gestures.

Open hand + sideways motion changes slide, a held fist pauses, and the index
finger alone moves a pointer dot.

Usage:
    python examples/demo_webcam.py [--camera 0] [--slides 10]
"""

import argparse
import sys

import cv2

from gesture_deck import CameraConfig, GestureClassifier, GestureState, HandDetector


STATE_COLORS = {
    GestureState.PAUSED: (0, 0, 255),
    GestureState.READY: (0, 255, 0),
    GestureState.SWIPE_READY: (255, 200, 0),
    GestureState.SWIPE_LEFT: (0, 255, 255),
    GestureState.SWIPE_RIGHT: (0, 255, 255),
}


def draw_overlay(frame, classifier, slide, total):
    h, w = frame.shape[:2]
    status = classifier.status
    color = STATE_COLORS.get(status.state, (200, 200, 200))

    cv2.putText(
        frame,
        f"{status.state.value} | fingers: {status.finger_count} | {status.confidence:.0%}",
        (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2,
    )
    cv2.putText(
        frame, f"Slide {slide + 1}/{total}",
        (10, h - 20), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (255, 255, 255), 2,
    )

    pointer = classifier.pointer_state
    if pointer.active:
        # Pointer is in screen space (mirrored); draw it on the mirrored preview
        cv2.circle(frame, (int(pointer.x * w), int(pointer.y * h)), 10, (0, 0, 255), -1)
    return frame


def main():
    parser = argparse.ArgumentParser(description="gesture-deck webcam demo")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--slides", type=int, default=10, help="Number of fake slides")
    args = parser.parse_args()

    cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        print(f"Error: Cannot open camera {args.camera}")
        sys.exit(1)

    slide = 0

    def next_slide():
        nonlocal slide
        slide = min(args.slides - 1, slide + 1)
        print(f"  ➡️  slide {slide + 1}")

    def previous_slide():
        nonlocal slide
        slide = max(0, slide - 1)
        print(f"  ⬅️  slide {slide + 1}")

    classifier = GestureClassifier(
        on_swipe_left=previous_slide,
        on_swipe_right=next_slide,
        on_pause=lambda: print("  ✊ paused"),
    )

    print("Press 'q' to quit\n")
    with HandDetector(CameraConfig(index=args.camera)) as detector:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            classifier.process_frame(detector.detect(frame_rgb))

            preview = cv2.flip(frame, 1)
            cv2.imshow("gesture-deck", draw_overlay(preview, classifier, slide, args.slides))
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break

    cap.release()
    cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
