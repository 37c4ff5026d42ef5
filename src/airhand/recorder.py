"""Session recording and replay: capture frame streams to disk.

Recordings keep the caller's timestamps and the frames with no hand, so a
replay through a fresh ``GestureEngine`` reproduces the original gesture
states exactly. Useful for:
- Reproducible tests without a camera
- Tuning thresholds against a real session
- Demo recordings that play back deterministically
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

import numpy as np

from airhand.landmarks import NUM_LANDMARKS, HandFrame
from airhand.state import GestureState

if TYPE_CHECKING:
    from airhand.engine import GestureEngine

logger = logging.getLogger("airhand.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """A single frame in a recording."""
    timestamp_ms: float
    frame: Optional[HandFrame]
    state: dict = field(default_factory=dict)  # GestureState.to_dict() at capture time

    def to_dict(self) -> dict:
        return {
            "timestamp_ms": self.timestamp_ms,
            "hand": self.frame.to_dict() if self.frame is not None else None,
            "state": self.state,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RecordedFrame:
        hand = data.get("hand")
        return cls(
            timestamp_ms=data["timestamp_ms"],
            frame=HandFrame.from_dict(hand) if hand is not None else None,
            state=data.get("state", {}),
        )


class SessionRecorder:
    """Records hand frames (and optionally the engine's states) to a file.

    Usage:
        recorder = SessionRecorder()
        recorder.start()
        # In your frame loop:
        state = engine.process(frame, now_ms)
        recorder.add_frame(frame, now_ms, state)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._frames = []
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
    def duration_ms(self) -> float:
        if len(self._frames) < 2:
            return 0.0
        return self._frames[-1].timestamp_ms - self._frames[0].timestamp_ms

    def add_frame(
        self,
        frame: Optional[HandFrame],
        timestamp_ms: float,
        state: Optional[GestureState] = None,
    ):
        if not self._recording:
            return
        self._frames.append(RecordedFrame(
            timestamp_ms=float(timestamp_ms),
            frame=frame,
            state=state.to_dict() if state is not None else {},
        ))

    def save(self, path: str | Path):
        """Save recording to JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration_ms": self.duration_ms,
            "frames": [f.to_dict() for f in self._frames],
        }
        with open(path, "w") as f:
            json.dump(data, f)
        logger.info("Saved %d frames to %s", len(self._frames), path)

    def save_compact(self, path: str | Path) -> Path:
        """Save as compressed npz. Absent hands are stored as a mask."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        n = len(self._frames)
        timestamps = np.array([f.timestamp_ms for f in self._frames], dtype=np.float64)
        hands = np.zeros((n, NUM_LANDMARKS, 2), dtype=np.float32)
        present = np.zeros(n, dtype=bool)
        for i, f in enumerate(self._frames):
            if f.frame is not None:
                hands[i] = f.frame.points
                present[i] = True
        states = json.dumps([f.state for f in self._frames])

        np.savez_compressed(
            path,
            timestamps=timestamps,
            hands=hands,
            present=present,
            states=np.array([states]),
        )
        logger.info("Saved %d frames to %s", n, path)
        return path


class SessionPlayer:
    """Replays a recorded session.

    Usage:
        player = SessionPlayer.load("session.json")
        states = player.replay(GestureEngine())

        # Or pace frames at the recorded rate:
        for rec in player.play_realtime():
            engine.process(rec.frame, rec.timestamp_ms)
    """

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        path = Path(path)
        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)
        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"{path}: unsupported recording version {version}")
        return cls([RecordedFrame.from_dict(f) for f in data["frames"]])

    @classmethod
    def _load_compact(cls, path: Path) -> SessionPlayer:
        with np.load(path, allow_pickle=False) as data:
            timestamps = data["timestamps"]
            hands = data["hands"]
            present = data["present"]
            states = json.loads(str(data["states"][0]))

        frames = [
            RecordedFrame(
                timestamp_ms=float(timestamps[i]),
                frame=HandFrame(hands[i]) if present[i] else None,
                state=states[i] if i < len(states) else {},
            )
            for i in range(len(timestamps))
        ]
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration_ms(self) -> float:
        if len(self._frames) < 2:
            return 0.0
        return self._frames[-1].timestamp_ms - self._frames[0].timestamp_ms

    def play(self) -> Iterator[RecordedFrame]:
        """Iterate through all frames instantly (no timing)."""
        yield from self._frames

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Yield frames paced at the recorded timing, scaled by ``speed``."""
        if not self._frames:
            return

        first = self._frames[0].timestamp_ms
        start = time.monotonic()
        for rec in self._frames:
            target = (rec.timestamp_ms - first) / 1000.0 / speed
            elapsed = time.monotonic() - start
            if target > elapsed:
                time.sleep(target - elapsed)
            yield rec

    def replay(self, engine: GestureEngine) -> list[GestureState]:
        """Feed every frame through ``engine`` with its recorded timestamp."""
        return [engine.process(rec.frame, rec.timestamp_ms) for rec in self._frames]

    def get_frame(self, index: int) -> Optional[RecordedFrame]:
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None
