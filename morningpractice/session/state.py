"""Session state model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..content.catalog import ExerciseRecord


class Stage(str, Enum):
    """Session stages, in the only order they are visited."""
    START = "start"
    WARM_UP = "warm_up"
    EXERCISE = "exercise"
    COOL_DOWN = "cool_down"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of a practice session.

    Attributes:
        stage: Current stage
        seconds_remaining: Countdown value shown to the user
        timer_running: True while a countdown is active
        exercise_index: Index into selected_exercises (0 outside EXERCISE)
        selected_exercises: Exercises drawn at start; empty only in START
        muted: Silences narration and chime
        awaiting_narration: Go was pressed and the exercise timer waits for
            the instructions to finish
    """
    stage: Stage = Stage.START
    seconds_remaining: int = 0
    timer_running: bool = False
    exercise_index: int = 0
    selected_exercises: tuple[ExerciseRecord, ...] = ()
    muted: bool = False
    awaiting_narration: bool = False

    @property
    def total_exercises(self) -> int:
        return len(self.selected_exercises)

    @property
    def current_exercise(self) -> Optional[ExerciseRecord]:
        if self.stage is not Stage.EXERCISE:
            return None
        if 0 <= self.exercise_index < len(self.selected_exercises):
            return self.selected_exercises[self.exercise_index]
        return None

    @property
    def is_last_exercise(self) -> bool:
        return self.exercise_index >= len(self.selected_exercises) - 1

    def to_dict(self) -> dict:
        """Serialize for logging and CLI output."""
        return {
            "stage": self.stage.value,
            "seconds_remaining": self.seconds_remaining,
            "timer_running": self.timer_running,
            "exercise_index": self.exercise_index,
            "selected_exercises": [e.name for e in self.selected_exercises],
            "muted": self.muted,
            "awaiting_narration": self.awaiting_narration,
        }
