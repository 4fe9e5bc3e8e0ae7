"""
Practice Session - executes session transitions.

PracticeSession owns the single countdown, the narrator and the chime, and
is the only place that turns reducer effects into side effects:

    user action / timer callback / narration completion
    → reduce(state, event) → new state + effects
    → carry out effects (speak, start/cancel timer, chime, mute)
    → emit SessionEvents for the UI

Events are processed run-to-completion: an event raised while another is
being handled (for example a narration fallback) is queued and handled
right after. Every timer and narration callback captures the session epoch
at scheduling time; a reset bumps the epoch so late callbacks from the
previous run are dropped before they reach the reducer.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from typing import Optional, Protocol, Sequence

from ..config import PracticeConfig
from ..content.catalog import EXERCISES, ExerciseRecord
from ..engine.countdown import CountdownTimer
from ..engine.narrator import Narrator
from ..engine.scheduling import Scheduler
from ..engine.shuffler import select
from .events import SessionEvent, SessionEventEmitter, SessionEventType
from .state import SessionState, Stage
from .transitions import (
    CancelSpeech,
    CancelTimer,
    Effect,
    Event,
    RepeatInstructions,
    ResetPractice,
    RingChime,
    SetMuted,
    Speak,
    StartExercise,
    StartPractice,
    StartTimer,
    Tick,
    TimerExpired,
    ToggleMute,
    Transition,
    reduce,
)


class ChimeLike(Protocol):
    muted: bool

    def ring(self) -> bool: ...


class PracticeSession:
    """
    Single practice session with explicit start/cancel lifecycle.

    Usage:
        session = PracticeSession(PracticeConfig(), scheduler, narrator=narrator, chime=chime)
        session.start_practice()     # START -> WARM_UP
        ...                          # scheduler delivers ticks
        session.start_exercise()     # "Go"
        session.reset_practice()     # back to START from anywhere

    Args:
        config: Timing and narration constants
        scheduler: Clock that delivers ticks and narration completions
        narrator: Speech output (default: silent narrator)
        chime: Transition chime (default: none)
        event_emitter: Event bus (default: new emitter)
        rng: Random source for exercise selection
        catalogue: Exercises to draw from
    """

    def __init__(
        self,
        config: PracticeConfig,
        scheduler: Scheduler,
        *,
        narrator: Optional[Narrator] = None,
        chime: Optional[ChimeLike] = None,
        event_emitter: Optional[SessionEventEmitter] = None,
        rng: Optional[random.Random] = None,
        catalogue: Sequence[ExerciseRecord] = EXERCISES,
    ):
        ok, error = config.validate()
        if not ok:
            raise ValueError(f"Invalid practice config: {error}")

        self.config = config
        self.scheduler = scheduler
        self.narrator = narrator or Narrator(None, scheduler, config)
        self.chime = chime
        self.event_emitter = event_emitter or SessionEventEmitter()
        self.rng = rng
        self.catalogue = tuple(catalogue)

        self.logger = logging.getLogger(__name__)

        self._state = SessionState()
        self._timer = CountdownTimer(scheduler)
        self._epoch = 0
        self._queue: deque[Event] = deque()
        self._processing = False

    # -------- read-only view ------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def stage(self) -> Stage:
        return self._state.stage

    @property
    def muted(self) -> bool:
        return self._state.muted

    @property
    def current_exercise(self) -> Optional[ExerciseRecord]:
        return self._state.current_exercise

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    # -------- user actions --------------------------------------------------
    def start_practice(self) -> bool:
        """Draw exercises and begin the warm-up."""
        if self._state.stage is not Stage.START:
            return self._dispatch(StartPractice(()))
        exercises = select(self.catalogue, self.config.exercise_count, self.rng)
        return self._dispatch(StartPractice(exercises))

    def start_exercise(self) -> bool:
        """Go: speak the current exercise, then start its timer."""
        return self._dispatch(StartExercise())

    def repeat_instructions(self) -> bool:
        """Speak the current exercise again without starting the timer."""
        return self._dispatch(RepeatInstructions())

    def reset_practice(self) -> bool:
        """Return to START from any stage, cancelling pending work."""
        self._epoch += 1
        return self._dispatch(ResetPractice())

    def toggle_mute(self) -> bool:
        return self._dispatch(ToggleMute())

    def shutdown(self) -> None:
        """Cancel everything and release narration/chime resources."""
        self.reset_practice()
        self.narrator.shutdown()
        close = getattr(self.chime, "close", None)
        if callable(close):
            close()

    # -------- dispatch ------------------------------------------------------
    def _dispatch(self, event: Event) -> bool:
        """Process *event* (and anything it queues).

        Returns whether *event* was accepted. Events raised while another
        one is being processed are queued and report True.
        """
        self._queue.append(event)
        if self._processing:
            return True

        accepted = False
        self._processing = True
        try:
            first = True
            while self._queue:
                transition = self._process(self._queue.popleft())
                if first:
                    accepted = transition.accepted
                    first = False
        finally:
            self._processing = False
        return accepted

    def _dispatch_from_callback(self, epoch: int, event: Event) -> None:
        if epoch != self._epoch:
            self.logger.debug("[session] Dropped stale %s (epoch %d != %d)", type(event).__name__, epoch, self._epoch)
            return
        self._dispatch(event)

    def _process(self, event: Event) -> Transition:
        previous = self._state
        transition = reduce(previous, event, self.config)

        if not transition.accepted:
            self.logger.debug("[session] Ignored %s: %s", type(event).__name__, transition.ignored)
            self.event_emitter.emit(SessionEvent(
                SessionEventType.TRIGGER_IGNORED,
                data={"event": type(event).__name__, "reason": transition.ignored},
            ))
            return transition

        self._state = transition.state
        for effect in transition.effects:
            self._apply(effect)
        self._announce(previous, event)
        return transition

    # -------- effects -------------------------------------------------------
    def _apply(self, effect: Effect) -> None:
        epoch = self._epoch
        if isinstance(effect, Speak):
            self._speak(epoch, effect)
        elif isinstance(effect, StartTimer):
            self._timer.start(
                effect.seconds,
                on_tick=lambda remaining: self._dispatch_from_callback(epoch, Tick(remaining)),
                on_expire=lambda: self._dispatch_from_callback(epoch, TimerExpired()),
            )
        elif isinstance(effect, CancelTimer):
            self._timer.cancel()
        elif isinstance(effect, CancelSpeech):
            self.narrator.cancel()
        elif isinstance(effect, RingChime):
            if self.chime is not None:
                self.chime.ring()
        elif isinstance(effect, SetMuted):
            self.narrator.muted = effect.muted
            if self.chime is not None:
                self.chime.muted = effect.muted
        else:
            raise TypeError(f"Unknown session effect: {effect!r}")

    def _speak(self, epoch: int, effect: Speak) -> None:
        if effect.then is None:
            self.narrator.speak(effect.text)
            return
        follow_up = effect.then
        started = self.narrator.speak(
            effect.text,
            on_complete=lambda: self._dispatch_from_callback(epoch, follow_up),
        )
        if not started:
            # Nothing will be spoken, so nothing will call back.
            self._queue.append(follow_up)

    # -------- notifications -------------------------------------------------
    def _announce(self, previous: SessionState, event: Event) -> None:
        state = self._state
        emit = self.event_emitter.emit

        if isinstance(event, Tick):
            emit(SessionEvent(SessionEventType.TICK, data={"remaining": state.seconds_remaining}))
        if state.muted != previous.muted:
            self.logger.info("[session] %s", "Muted" if state.muted else "Unmuted")
            emit(SessionEvent(SessionEventType.MUTE_CHANGED, data={"muted": state.muted}))
        if state.stage is not previous.stage or state.exercise_index != previous.exercise_index:
            self._log_position(previous)
        if state.stage is not previous.stage:
            emit(SessionEvent(
                SessionEventType.STAGE_CHANGED,
                data={"stage": state.stage.value, "previous": previous.stage.value},
            ))
        emit(SessionEvent(SessionEventType.STATE_CHANGED, data={"state": state}))
        if isinstance(event, ResetPractice):
            emit(SessionEvent(SessionEventType.SESSION_RESET))
        elif state.stage is Stage.COMPLETE and previous.stage is not Stage.COMPLETE:
            emit(SessionEvent(SessionEventType.SESSION_COMPLETE))

    def _log_position(self, previous: SessionState) -> None:
        state = self._state
        exercise = state.current_exercise
        if exercise is not None:
            self.logger.info(
                "[session] %s -> exercise %d/%d: %s",
                previous.stage.value, state.exercise_index + 1, state.total_exercises, exercise.name,
            )
        else:
            self.logger.info("[session] %s -> %s", previous.stage.value, state.stage.value)


def build_session(
    config: PracticeConfig,
    scheduler: Scheduler,
    *,
    audio: bool = True,
    speech: bool = True,
    muted: bool = False,
    event_emitter: Optional[SessionEventEmitter] = None,
    rng: Optional[random.Random] = None,
) -> PracticeSession:
    """Create a session wired to the real chime and speech backends.

    Backends that fail to initialize leave the session silent but working.
    """
    log = logging.getLogger(__name__)
    chime = None
    if audio:
        from ..engine.chime import Chime

        chime = Chime(config)
    backend = None
    if speech:
        from ..engine.speech import Pyttsx3Backend

        backend = Pyttsx3Backend()
    narrator = Narrator(backend, scheduler, config)
    log.info(
        "[session] Built session (chime=%s, speech=%s)",
        bool(chime and chime.available), narrator.available,
    )

    session = PracticeSession(
        config,
        scheduler,
        narrator=narrator,
        chime=chime,
        event_emitter=event_emitter,
        rng=rng,
    )
    if muted:
        session.toggle_mute()
    return session
