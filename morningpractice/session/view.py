"""Read-only view model for presentation layers.

The GUI and the CLI render :class:`PracticeView`; they never inspect
:class:`SessionState` directly and hold no session logic of their own.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import PracticeConfig
from .state import SessionState, Stage


def format_time(seconds: int) -> str:
    """Format seconds as ``M:SS``."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"


def _minutes_label(seconds: int) -> str:
    minutes = max(1, round(seconds / 60))
    return f"{minutes}-minute"


@dataclass(frozen=True)
class PracticeView:
    """Everything a presentation layer needs for one frame.

    The ``can_*`` flags disable controls whose action would be ignored.
    """
    stage: Stage
    title: str
    body: str
    clock: str = ""
    progress: str = ""
    exercise_name: str = ""
    exercise_description: str = ""
    muted: bool = False
    can_start: bool = False
    can_go: bool = False
    can_listen: bool = False
    can_reset: bool = False

    @property
    def mute_label(self) -> str:
        return "Unmute" if self.muted else "Mute"


def build_view(state: SessionState, config: PracticeConfig) -> PracticeView:
    stage = state.stage

    if stage is Stage.START:
        return PracticeView(
            stage=stage,
            title="Ready to begin?",
            body=(
                f"A {_minutes_label(config.warm_up_seconds)} warm-up, "
                f"{config.exercise_count} exercises ({config.exercise_seconds}s each), "
                f"and a {_minutes_label(config.cool_down_seconds)} cool-down."
            ),
            muted=state.muted,
            can_start=True,
        )

    if stage in (Stage.WARM_UP, Stage.COOL_DOWN):
        warm = stage is Stage.WARM_UP
        return PracticeView(
            stage=stage,
            title="Warm Up" if warm else "Cool Down",
            body=(
                "Slow stretching and easy movements from head to feet."
                if warm else "Stay in child pose and take deep abdominal breaths."
            ),
            clock=format_time(state.seconds_remaining),
            muted=state.muted,
            can_reset=True,
        )

    if stage is Stage.EXERCISE:
        exercise = state.current_exercise
        idle = not state.timer_running and not state.awaiting_narration
        clock_seconds = state.seconds_remaining if state.timer_running else config.exercise_seconds
        return PracticeView(
            stage=stage,
            title=exercise.name if exercise else "Exercise",
            body=exercise.description if exercise else "",
            clock=format_time(clock_seconds),
            progress=f"Exercise {state.exercise_index + 1} of {state.total_exercises}",
            exercise_name=exercise.name if exercise else "",
            exercise_description=exercise.description if exercise else "",
            muted=state.muted,
            can_go=idle and exercise is not None,
            can_listen=idle and exercise is not None and not state.muted,
            can_reset=True,
        )

    return PracticeView(
        stage=stage,
        title="You did great!",
        body="Your body and mind thank you. See you tomorrow.",
        muted=state.muted,
        can_reset=True,
    )
