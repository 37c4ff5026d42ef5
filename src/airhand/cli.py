"""airhand CLI.

Usage:
    airhand live: Classify gestures from the camera
    airhand replay: Replay a recorded session through the engine
    airhand benchmark: Measure per-frame latency on synthetic frames
    airhand config: Print or write the default engine config
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer
import yaml

from airhand.config import EngineConfig
from airhand.engine import GestureEngine
from airhand.errors import ConfigError
from airhand.state import GestureLabel

app = typer.Typer(
    name="airhand",
    help="🤚 Real-time hand gesture classification from pose landmarks.",
    add_completion=False,
)

logger = logging.getLogger("airhand.cli")


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str]) -> EngineConfig:
    if not path:
        return EngineConfig()
    try:
        return EngineConfig.from_yaml(path)
    except (OSError, ConfigError, yaml.YAMLError) as e:
        typer.echo(f"❌ Could not load config {path}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def live(
    camera: int = typer.Option(0, help="Camera device index"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Engine config YAML"),
    record: Optional[str] = typer.Option(None, help="Save the session to this file"),
    display: bool = typer.Option(True, help="Show an annotated preview window"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Classify gestures live from the camera."""
    import cv2
    from airhand.detector import HandDetector
    from airhand.recorder import SessionRecorder

    _setup_logging(log_level)
    engine = GestureEngine(_load_config(config))
    engine.on_transition(
        lambda prev, cur, t: typer.echo(f"   🤚 {prev.value} → {cur.value}")
    )

    cap = cv2.VideoCapture(camera)
    if not cap.isOpened():
        typer.echo(f"❌ Could not open camera {camera}", err=True)
        raise typer.Exit(1)

    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or 640
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or 480
    recorder = SessionRecorder()
    if record:
        recorder.start()

    typer.echo(f"🎥 Camera {camera} ({width}x{height}). Press Ctrl+C or 'q' to stop")
    start = time.monotonic()

    try:
        with HandDetector(width=width, height=height) as detector:
            while True:
                ret, image = cap.read()
                if not ret:
                    continue

                now_ms = (time.monotonic() - start) * 1000.0
                hand = detector.detect(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
                state = engine.process(hand, now_ms)
                recorder.add_frame(hand, now_ms, state)

                if display:
                    # Landmarks are mirrored, so mirror the preview to match.
                    preview = cv2.flip(image, 1)
                    label = f"{state.current.value} {state.duration_ms / 1000:.1f}s"
                    cv2.putText(
                        preview, label, (10, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 255), 2,
                    )
                    cv2.imshow("airhand", preview)
                    if cv2.waitKey(1) & 0xFF == ord("q"):
                        break
    except KeyboardInterrupt:
        pass
    finally:
        cap.release()
        if display:
            cv2.destroyAllWindows()

    stats = engine.stats
    typer.echo(f"\n📊 {stats.frames} frames, {stats.hand_frames} with a hand, "
               f"{stats.transitions} transitions")

    if record:
        recorder.stop()
        recorder.save(record)
        typer.echo(f"💾 Saved {recorder.frame_count} frames to: {record}")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a .json or .npz recording"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Engine config YAML"),
    realtime: bool = typer.Option(False, help="Pace frames at the recorded timing"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier (with --realtime)"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Replay a recorded session and print every gesture transition."""
    from airhand.recorder import SessionPlayer

    _setup_logging(log_level)
    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = SessionPlayer.load(path)
    typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, "
               f"{player.duration_ms / 1000:.1f}s)")

    engine = GestureEngine(_load_config(config))
    logger.debug("Replay config: %s", engine.config)
    engine.on_transition(
        lambda prev, cur, t: typer.echo(f"   {t:10.1f}ms  {prev.value:>6} → {cur.value}")
    )

    frames = player.play_realtime(speed=speed) if realtime else player.play()
    held = _hold_times(engine, frames)

    typer.echo(f"\n✅ Replay complete. {engine.stats.transitions} transitions.")
    for label in GestureLabel:
        if label.value in held:
            typer.echo(f"   {label.value:6s} held {held[label.value] / 1000:.2f}s")


def _hold_times(engine: GestureEngine, frames) -> dict[str, float]:
    """Run frames through the engine and total the time spent in each label.

    A segment runs from the timestamp its label was entered to the timestamp
    of the next transition, or of the last frame for the final segment.
    """
    held: dict[str, float] = {}
    label: Optional[GestureLabel] = None
    entered_ms = 0.0
    for rec in frames:
        state = engine.process(rec.frame, rec.timestamp_ms)
        now_ms = engine.session.last_ms
        if state.current != label:
            if label is not None:
                held[label.value] = held.get(label.value, 0.0) + now_ms - entered_ms
            label, entered_ms = state.current, now_ms
    if label is not None:
        held[label.value] = held.get(label.value, 0.0) + engine.session.last_ms - entered_ms
    return held


@app.command()
def benchmark(
    iterations: int = typer.Option(1000, help="Number of frames"),
    seed: int = typer.Option(42, help="RNG seed for synthetic landmarks"),
):
    """Run the engine on synthetic frames and report per-stage latency."""
    import numpy as np

    typer.echo(f"⚡ Running benchmark: {iterations} frames")

    engine = GestureEngine(EngineConfig(strict=False))
    rng = np.random.default_rng(seed)
    frames = rng.random((iterations, 21, 2)) * np.array([640.0, 480.0])

    times = []
    for i, frame in enumerate(frames):
        t0 = time.perf_counter()
        engine.process(frame, i * 33.3)
        times.append(time.perf_counter() - t0)

    avg_ms = sum(times) / len(times) * 1000
    p95_ms = sorted(times)[int(len(times) * 0.95)] * 1000
    fps = 1000 / avg_ms if avg_ms > 0 else 0

    typer.echo(f"\n📊 Results:")
    typer.echo(f"   Average latency: {avg_ms:.3f} ms")
    typer.echo(f"   P95 latency:     {p95_ms:.3f} ms")
    typer.echo(f"   Throughput:      {fps:.0f} FPS")

    typer.echo(f"\n📈 Stage breakdown:")
    for name, stats in engine.profiler.summary().items():
        typer.echo(f"   {name:15s} avg={stats['avg_ms']:.3f}ms  p95={stats['p95_ms']:.3f}ms")


@app.command("config")
def show_config(
    output: Optional[str] = typer.Option(None, "-o", help="Write the default config to this YAML file"),
):
    """Print the default engine configuration, or write it to a file."""
    cfg = EngineConfig()
    if output:
        cfg.to_yaml(output)
        typer.echo(f"💾 Saved to {output}")
        return
    for key, value in cfg.to_dict().items():
        typer.echo(f"{key}: {value}")


def main():
    app()


if __name__ == "__main__":
    main()
