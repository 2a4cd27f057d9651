"""gesture-deck CLI.

Usage:
    gesture-deck run       Live camera session, prints slide events
    gesture-deck record    Record landmark frames from the camera
    gesture-deck replay    Feed a recording through the classifier
    gesture-deck config    Print or write the default configuration
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from pathlib import Path
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

from gesture_deck.classifier import GestureClassifier, GestureState
from gesture_deck.config import DeckConfig
from gesture_deck.recorder import FramePlayer, FrameRecorder
from gesture_deck.session import GestureSession

app = typer.Typer(
    name="gesture-deck",
    help="✋ Hand-gesture control for presentations.",
    add_completion=False,
)


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str]) -> DeckConfig:
    if not path:
        return DeckConfig()
    try:
        return DeckConfig.from_yaml(path)
    except FileNotFoundError:
        typer.echo(f"❌ Config file not found: {path}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)


def _event_printer(start: float):
    def printer(label: str):
        def handler():
            typer.echo(f"[{time.monotonic() - start:7.2f}s] {label}")
        return handler
    return printer


@app.command()
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    camera: Optional[int] = typer.Option(None, help="Camera device index"),
    max_frames: Optional[int] = typer.Option(None, help="Stop after this many frames"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Run a live gesture session and print swipe/pause events."""
    _setup_logging(log_level)
    deck_config = _load_config(config)
    if camera is not None:
        deck_config.camera.index = camera

    session = GestureSession(deck_config)
    printer = _event_printer(time.monotonic())
    session.classifier.set_handlers(
        on_swipe_left=printer("⬅️  swipe left"),
        on_swipe_right=printer("➡️  swipe right"),
        on_pause=printer("✊ pause"),
    )

    if not session.start():
        typer.echo(f"❌ {session.error}", err=True)
        raise typer.Exit(1)

    typer.echo(f"🎥 Watching camera {deck_config.camera.index}, press Ctrl+C to stop")
    try:
        frames = session.run(max_frames=max_frames)
    except KeyboardInterrupt:
        frames = session.stats.frames
    finally:
        session.stop()

    if session.error:
        typer.echo(f"❌ {session.error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"\n✅ Processed {frames} frames")


@app.command()
def record(
    output: str = typer.Option("recording.json", "-o", help="Output file path"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    compact: bool = typer.Option(False, help="Save in compact .npz format"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    camera: Optional[int] = typer.Option(None, help="Camera device index"),
):
    """Record landmark frames from the camera for later replay."""
    _setup_logging("warning")
    deck_config = _load_config(config)
    if camera is not None:
        deck_config.camera.index = camera

    recorder = FrameRecorder()
    session = GestureSession(deck_config, recorder=recorder)
    if not session.start():
        typer.echo(f"❌ {session.error}", err=True)
        raise typer.Exit(1)

    typer.echo(f"🎥 Recording from camera {deck_config.camera.index}...")
    typer.echo("   Press Ctrl+C to stop")

    start = time.monotonic()
    try:
        while session.is_active:
            if duration > 0 and time.monotonic() - start >= duration:
                break
            session.run(max_frames=1)
    except KeyboardInterrupt:
        pass
    finally:
        session.stop()

    if compact:
        path = recorder.save_compact(output)
    else:
        path = Path(output)
        recorder.save(path)

    typer.echo(f"\n✅ Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s)")
    typer.echo(f"   Saved to: {path}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Recording file (.json or .npz)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print every state change"),
):
    """Replay a recording through the classifier and report events."""
    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    deck_config = _load_config(config)
    player = FramePlayer.load(path)
    classifier = GestureClassifier(deck_config.classifier)

    events: Counter = Counter()
    current = {"t": 0.0}

    def on(label: str):
        def handler():
            events[label] += 1
            typer.echo(f"[{current['t']:7.2f}s] {label}")
        return handler

    classifier.set_handlers(
        on_swipe_left=on("swipe_left"),
        on_swipe_right=on("swipe_right"),
        on_pause=on("pause"),
    )

    typer.echo(f"📂 {path.name}: {player.frame_count} frames, {player.duration:.1f}s")
    states: Counter = Counter()
    previous: Optional[GestureState] = None
    for frame in player.play():
        current["t"] = frame.timestamp
        status = classifier.process_frame(frame.hand, timestamp=frame.timestamp)
        states[status.state.value] += 1
        if verbose and status.state != previous:
            typer.echo(f"[{frame.timestamp:7.2f}s]   {status.state.value} ({status.finger_count} fingers)")
        previous = status.state

    typer.echo("\n📊 Events:")
    for name in ("swipe_left", "swipe_right", "pause"):
        typer.echo(f"   {name:<12} {events[name]}")
    typer.echo("   Frames by state:")
    for name, count in states.most_common():
        typer.echo(f"     {name:<12} {count}")


@app.command("config")
def show_config(
    output: Optional[str] = typer.Option(None, "-o", help="Write to this file instead of stdout"),
):
    """Print or write the default configuration as YAML."""
    text = DeckConfig().to_yaml(output)
    if output:
        typer.echo(f"✅ Wrote default config to {output}")
    else:
        typer.echo(text, nl=False)


def main():
    app()


if __name__ == "__main__":
    main()
