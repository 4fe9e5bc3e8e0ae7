"""
Pure session transitions.

``reduce(state, event, config)`` returns the next state plus the effects the
session must carry out (speak, start timer, ring chime, ...). Nothing here
touches timers, audio or speech, so every transition can be checked with
plain values.

Transition table:

    START      + StartPractice              -> WARM_UP    speak, start warm-up timer
    WARM_UP    + TimerExpired               -> EXERCISE   speak; waits for Go
    EXERCISE   + StartExercise              -> EXERCISE   speak instructions, then timer
    EXERCISE   + TimerExpired (more left)   -> EXERCISE+1 chime, speak
    EXERCISE   + TimerExpired (last)        -> COOL_DOWN  chime, speak, start timer
    COOL_DOWN  + TimerExpired               -> COMPLETE   chime, speak
    any        + ResetPractice              -> START      cancel timer and speech
    any        + ToggleMute                 -> same       cancel speech when muting
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from ..config import PracticeConfig
from ..content import prompts
from ..content.catalog import ExerciseRecord
from .state import SessionState, Stage


# -------- events -------------------------------------------------------------
@dataclass(frozen=True)
class StartPractice:
    exercises: tuple[ExerciseRecord, ...]


@dataclass(frozen=True)
class StartExercise:
    pass


@dataclass(frozen=True)
class RepeatInstructions:
    pass


@dataclass(frozen=True)
class NarrationFinished:
    pass


@dataclass(frozen=True)
class Tick:
    remaining: int


@dataclass(frozen=True)
class TimerExpired:
    pass


@dataclass(frozen=True)
class ResetPractice:
    pass


@dataclass(frozen=True)
class ToggleMute:
    pass


Event = Union[
    StartPractice, StartExercise, RepeatInstructions, NarrationFinished,
    Tick, TimerExpired, ResetPractice, ToggleMute,
]


# -------- effects ------------------------------------------------------------
@dataclass(frozen=True)
class Speak:
    """Speak *text*; when *then* is set, dispatch it once speech completes
    (or immediately if nothing can be spoken)."""
    text: str
    then: Optional[Event] = None


@dataclass(frozen=True)
class StartTimer:
    seconds: int


@dataclass(frozen=True)
class CancelTimer:
    pass


@dataclass(frozen=True)
class CancelSpeech:
    pass


@dataclass(frozen=True)
class RingChime:
    pass


@dataclass(frozen=True)
class SetMuted:
    muted: bool


Effect = Union[Speak, StartTimer, CancelTimer, CancelSpeech, RingChime, SetMuted]


@dataclass(frozen=True)
class Transition:
    """Result of :func:`reduce`. ``ignored`` holds the reason for a no-op."""
    state: SessionState
    effects: tuple[Effect, ...] = ()
    ignored: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.ignored is None


def _ignore(state: SessionState, reason: str) -> Transition:
    return Transition(state, (), reason)


def _start_exercise_timer(state: SessionState, config: PracticeConfig) -> Transition:
    return Transition(
        replace(
            state,
            awaiting_narration=False,
            timer_running=True,
            seconds_remaining=config.exercise_seconds,
        ),
        (StartTimer(config.exercise_seconds),),
    )


def _on_start_practice(state: SessionState, event: StartPractice, config: PracticeConfig) -> Transition:
    if state.stage is not Stage.START:
        return _ignore(state, f"practice already in progress ({state.stage.value})")
    if not event.exercises:
        return _ignore(state, "no exercises selected")
    new_state = replace(
        state,
        stage=Stage.WARM_UP,
        seconds_remaining=config.warm_up_seconds,
        timer_running=True,
        exercise_index=0,
        selected_exercises=tuple(event.exercises),
        awaiting_narration=False,
    )
    return Transition(new_state, (Speak(prompts.WARM_UP), StartTimer(config.warm_up_seconds)))


def _exercise_gate_closed(state: SessionState) -> Optional[str]:
    if state.stage is not Stage.EXERCISE:
        return f"not in exercise stage ({state.stage.value})"
    if state.current_exercise is None:
        return "no exercise selected"
    if state.timer_running:
        return "exercise timer already running"
    if state.awaiting_narration:
        return "waiting for instructions to finish"
    return None


def _on_start_exercise(state: SessionState, config: PracticeConfig) -> Transition:
    reason = _exercise_gate_closed(state)
    if reason:
        return _ignore(state, reason)
    if state.muted:
        return _start_exercise_timer(state, config)
    return Transition(
        replace(state, awaiting_narration=True),
        (Speak(state.current_exercise.instructions, then=NarrationFinished()),),
    )


def _on_repeat_instructions(state: SessionState) -> Transition:
    reason = _exercise_gate_closed(state)
    if reason:
        return _ignore(state, reason)
    if state.muted:
        return _ignore(state, "muted")
    return Transition(state, (Speak(state.current_exercise.instructions),))


def _on_narration_finished(state: SessionState, config: PracticeConfig) -> Transition:
    if state.stage is not Stage.EXERCISE or not state.awaiting_narration:
        return _ignore(state, "no exercise waiting for narration")
    return _start_exercise_timer(state, config)


def _on_tick(state: SessionState, event: Tick) -> Transition:
    if not state.timer_running:
        return _ignore(state, "tick without running timer")
    effects: tuple[Effect, ...] = (RingChime(),) if event.remaining == 1 else ()
    return Transition(replace(state, seconds_remaining=max(0, event.remaining)), effects)


def _on_timer_expired(state: SessionState, config: PracticeConfig) -> Transition:
    if not state.timer_running:
        return _ignore(state, "expiry without running timer")
    stopped = replace(state, timer_running=False, seconds_remaining=0)

    if state.stage is Stage.WARM_UP:
        return Transition(
            replace(stopped, stage=Stage.EXERCISE, exercise_index=0),
            (Speak(prompts.WARM_UP_COMPLETE),),
        )

    if state.stage is Stage.EXERCISE:
        if not state.is_last_exercise:
            return Transition(
                replace(stopped, exercise_index=state.exercise_index + 1),
                (RingChime(), Speak(prompts.EXERCISE_COMPLETE)),
            )
        return Transition(
            replace(
                stopped,
                stage=Stage.COOL_DOWN,
                exercise_index=0,
                timer_running=True,
                seconds_remaining=config.cool_down_seconds,
            ),
            (RingChime(), Speak(prompts.COOL_DOWN), StartTimer(config.cool_down_seconds)),
        )

    if state.stage is Stage.COOL_DOWN:
        return Transition(
            replace(stopped, stage=Stage.COMPLETE),
            (RingChime(), Speak(prompts.COMPLETE)),
        )

    return _ignore(state, f"expiry in stage {state.stage.value}")


def _on_reset(state: SessionState) -> Transition:
    return Transition(SessionState(muted=state.muted), (CancelTimer(), CancelSpeech()))


def _on_toggle_mute(state: SessionState, config: PracticeConfig) -> Transition:
    muted = not state.muted
    toggled = replace(state, muted=muted)
    if not muted:
        return Transition(toggled, (SetMuted(False),))
    if toggled.awaiting_narration:
        # Instructions were cut off; start the exercise now.
        started = _start_exercise_timer(toggled, config)
        return Transition(started.state, (SetMuted(True), CancelSpeech()) + started.effects)
    return Transition(toggled, (SetMuted(True), CancelSpeech()))


def reduce(state: SessionState, event: Event, config: PracticeConfig) -> Transition:
    """Apply *event* to *state*. Never raises for a well-formed event."""
    if isinstance(event, StartPractice):
        return _on_start_practice(state, event, config)
    if isinstance(event, StartExercise):
        return _on_start_exercise(state, config)
    if isinstance(event, RepeatInstructions):
        return _on_repeat_instructions(state)
    if isinstance(event, NarrationFinished):
        return _on_narration_finished(state, config)
    if isinstance(event, Tick):
        return _on_tick(state, event)
    if isinstance(event, TimerExpired):
        return _on_timer_expired(state, config)
    if isinstance(event, ResetPractice):
        return _on_reset(state)
    if isinstance(event, ToggleMute):
        return _on_toggle_mute(state, config)
    raise TypeError(f"Unknown session event: {event!r}")
