from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class HorseFrame:
    horse_id: int
    name: str
    position: float
    speed_factor: float
    is_finished: bool
    finish_time: Optional[float] = None


@dataclass
class AnimationFrame:
    tick: int
    session_id: int
    timestamp: float
    elapsed: float
    paused: bool
    horses: List[HorseFrame] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TelemetryCollector:
    def __init__(self) -> None:
        self.frames: List[AnimationFrame] = []

    def record_frame(self, frame: AnimationFrame) -> None:
        self.frames.append(frame)

    def export(self) -> Sequence[AnimationFrame]:
        return tuple(self.frames)

    def frames_for_session(self, session_id: int) -> Sequence[AnimationFrame]:
        return tuple(frame for frame in self.frames if frame.session_id == session_id)

    def session_ids(self) -> List[int]:
        seen: List[int] = []
        for frame in self.frames:
            if frame.session_id not in seen:
                seen.append(frame.session_id)
        return seen

    def clear(self) -> None:
        self.frames.clear()
