"""
Integration tests for PracticeSession on a virtual clock.

Covers the full practice flow, the Go gate, narration sequencing, mute,
reset from every stage and stale callback handling.
"""

import random

import pytest

from morningpractice.config import PracticeConfig
from morningpractice.content import prompts
from morningpractice.engine.narrator import Narrator
from morningpractice.session import PracticeSession, SessionEventEmitter, SessionEventType, Stage


@pytest.fixture
def silent_session(scheduler, chime, rng):
    return PracticeSession(PracticeConfig(), scheduler, chime=chime, rng=rng)


@pytest.fixture
def voiced_session(scheduler, narrator, chime, rng):
    return PracticeSession(PracticeConfig(), scheduler, narrator=narrator, chime=chime, rng=rng)


def finish_speech(backend, scheduler):
    backend.finish()
    scheduler.run_pending()


def record(session, event_type):
    seen = []
    session.event_emitter.subscribe(event_type, seen.append)
    return seen


class TestFullFlow:

    def test_silent_session_reaches_complete(self, silent_session, scheduler, chime):
        s = silent_session
        completed = record(s, SessionEventType.SESSION_COMPLETE)

        assert s.start_practice()
        assert s.stage is Stage.WARM_UP
        assert s.state.total_exercises == 10
        scheduler.advance(59)
        assert s.state.seconds_remaining == 1
        scheduler.advance(1)
        assert s.stage is Stage.EXERCISE

        for i in range(10):
            assert s.state.exercise_index == i
            # no auto-advance without Go
            scheduler.advance(120)
            assert s.state.exercise_index == i and not s.state.timer_running
            assert s.start_exercise()
            assert s.state.timer_running
            scheduler.advance(30)

        assert s.stage is Stage.COOL_DOWN
        scheduler.advance(60)
        assert s.stage is Stage.COMPLETE
        assert len(completed) == 1
        # warm-up warning, two per exercise, cool-down warning and completion
        assert chime.rings == 1 + 2 * 10 + 2
        assert scheduler.pending_count() == 0

    def test_exercises_are_distinct(self, silent_session):
        silent_session.start_practice()
        names = [e.name for e in silent_session.state.selected_exercises]
        assert len(set(names)) == 10

    def test_seeded_rng_repeats_selection(self, scheduler):
        a = PracticeSession(PracticeConfig(), scheduler, rng=random.Random(5))
        b = PracticeSession(PracticeConfig(), scheduler, rng=random.Random(5))
        a.start_practice()
        b.start_practice()
        assert a.state.selected_exercises == b.state.selected_exercises

    def test_exercise_count_is_clamped(self, scheduler):
        s = PracticeSession(PracticeConfig(exercise_count=40), scheduler)
        s.start_practice()
        assert s.state.total_exercises == 22

    def test_invalid_config_rejected(self, scheduler):
        with pytest.raises(ValueError):
            PracticeSession(PracticeConfig(exercise_seconds=0), scheduler)


class TestNarrationSequencing:

    def enter_first_exercise(self, session, scheduler, backend):
        session.start_practice()
        finish_speech(backend, scheduler)
        scheduler.advance(60)
        finish_speech(backend, scheduler)
        assert session.stage is Stage.EXERCISE

    def test_timer_waits_for_instructions(self, voiced_session, scheduler, backend):
        s = voiced_session
        self.enter_first_exercise(s, scheduler, backend)
        s.start_exercise()
        assert backend.spoken[-1] == s.current_exercise.instructions
        assert s.state.awaiting_narration and not s.state.timer_running
        scheduler.advance(10)
        assert not s.state.timer_running
        finish_speech(backend, scheduler)
        assert s.state.timer_running and s.state.seconds_remaining == 30

    def test_prompts_spoken_in_order(self, voiced_session, scheduler, backend):
        s = voiced_session
        self.enter_first_exercise(s, scheduler, backend)
        s.start_exercise()
        finish_speech(backend, scheduler)
        scheduler.advance(30)
        assert backend.spoken[0] == prompts.WARM_UP
        assert backend.spoken[1] == prompts.WARM_UP_COMPLETE
        assert backend.spoken[-1] == prompts.EXERCISE_COMPLETE

    def test_double_go_is_ignored(self, voiced_session, scheduler, backend):
        s = voiced_session
        self.enter_first_exercise(s, scheduler, backend)
        ignored = record(s, SessionEventType.TRIGGER_IGNORED)
        assert s.start_exercise() is True
        assert s.start_exercise() is False
        assert len(ignored) == 1
        assert backend.spoken.count(s.current_exercise.instructions) == 1

    def test_listen_again_does_not_start_timer(self, voiced_session, scheduler, backend):
        s = voiced_session
        self.enter_first_exercise(s, scheduler, backend)
        assert s.repeat_instructions()
        finish_speech(backend, scheduler)
        assert not s.state.timer_running
        assert s.state.exercise_index == 0

    def test_mute_during_instructions_starts_timer(self, voiced_session, scheduler, backend, chime):
        s = voiced_session
        self.enter_first_exercise(s, scheduler, backend)
        s.start_exercise()
        s.toggle_mute()
        assert s.muted and chime.muted
        assert s.state.timer_running
        # late completion of the cut-off utterance changes nothing
        finish_speech(backend, scheduler)
        scheduler.advance(5)
        assert s.state.seconds_remaining == 25

    def test_double_toggle_restores_sound(self, voiced_session, scheduler, backend, chime):
        s = voiced_session
        s.toggle_mute()
        s.toggle_mute()
        assert not s.muted and not chime.muted and not s.narrator.muted
        s.start_practice()
        assert backend.spoken == [prompts.WARM_UP]

    def test_muted_session_speaks_nothing(self, voiced_session, scheduler, backend, chime):
        s = voiced_session
        s.toggle_mute()
        s.start_practice()
        scheduler.advance(60)
        s.start_exercise()
        assert s.state.timer_running
        scheduler.advance(30)
        assert backend.spoken == []
        assert chime.rings == 0

    def test_speech_failure_does_not_stall(self, scheduler, chime, rng):
        from conftest import FakeSpeechBackend

        narrator = Narrator(FakeSpeechBackend(fail=True), scheduler, language_tag="en-US")
        s = PracticeSession(PracticeConfig(), scheduler, narrator=narrator, chime=chime, rng=rng)
        s.start_practice()
        scheduler.advance(60)
        s.start_exercise()
        assert s.state.timer_running


class TestReset:

    @pytest.mark.parametrize("steps", [0, 1, 2, 3, 4])
    def test_reset_from_every_stage(self, silent_session, scheduler, steps):
        s = silent_session
        s.toggle_mute()
        if steps >= 1:
            s.start_practice()
        if steps >= 2:
            scheduler.advance(60)
        if steps >= 3:
            s.start_exercise()
            scheduler.advance(10)
        if steps >= 4:
            s.reset_practice()
            s.start_practice()
            scheduler.advance(60)
            for _ in range(10):
                s.start_exercise()
                scheduler.advance(30)
            scheduler.advance(60)
            assert s.stage is Stage.COMPLETE

        s.reset_practice()
        assert s.stage is Stage.START
        assert s.state.selected_exercises == ()
        assert not s.state.timer_running
        assert s.muted
        assert not s.timer.running
        scheduler.advance(120)
        assert s.stage is Stage.START

    def test_reset_during_cool_down(self, scheduler, chime, rng):
        s = PracticeSession(PracticeConfig(exercise_count=2), scheduler, chime=chime, rng=rng)
        s.start_practice()
        scheduler.advance(60)
        for _ in range(2):
            s.start_exercise()
            scheduler.advance(30)
        scheduler.advance(20)
        assert s.stage is Stage.COOL_DOWN
        assert s.state.seconds_remaining == 40
        rings = chime.rings

        s.reset_practice()
        assert s.stage is Stage.START
        assert not s.timer.running
        scheduler.advance(200)
        assert s.stage is Stage.START
        assert chime.rings == rings
        assert scheduler.pending_count() == 0

    def test_stale_narration_after_reset_is_dropped(self, voiced_session, scheduler, backend):
        s = voiced_session
        s.start_practice()
        finish_speech(backend, scheduler)
        scheduler.advance(60)
        finish_speech(backend, scheduler)
        s.start_exercise()
        s.reset_practice()
        s.start_practice()
        # the Go utterance from the previous run completes late
        backend.finish()
        scheduler.run_pending()
        assert s.stage is Stage.WARM_UP
        assert not s.state.awaiting_narration

    def test_reset_emits_event(self, silent_session):
        resets = record(silent_session, SessionEventType.SESSION_RESET)
        silent_session.start_practice()
        silent_session.reset_practice()
        assert len(resets) == 1

    def test_start_twice_is_ignored(self, silent_session):
        assert silent_session.start_practice()
        first = silent_session.state.selected_exercises
        assert silent_session.start_practice() is False
        assert silent_session.state.selected_exercises == first


class TestEvents:

    def test_stage_and_tick_events(self, scheduler):
        emitter = SessionEventEmitter()
        stages, ticks = [], []
        emitter.subscribe(SessionEventType.STAGE_CHANGED, lambda e: stages.append(e.data["stage"]))
        emitter.subscribe(SessionEventType.TICK, lambda e: ticks.append(e.data["remaining"]))
        s = PracticeSession(PracticeConfig(warm_up_seconds=3), scheduler, event_emitter=emitter)
        s.start_practice()
        scheduler.advance(3)
        assert stages == ["warm_up", "exercise"]
        assert ticks == [2, 1, 0]

    def test_failing_subscriber_does_not_break_session(self, silent_session, scheduler):
        def boom(_event):
            raise RuntimeError("ui bug")

        silent_session.event_emitter.subscribe(SessionEventType.STATE_CHANGED, boom)
        assert silent_session.start_practice()
        scheduler.advance(60)
        assert silent_session.stage is Stage.EXERCISE

    def test_mute_changed_event(self, silent_session):
        seen = record(silent_session, SessionEventType.MUTE_CHANGED)
        silent_session.toggle_mute()
        assert seen[0].data == {"muted": True}

    def test_shutdown_closes_chime(self, silent_session, chime):
        silent_session.start_practice()
        silent_session.shutdown()
        assert chime.closed
        assert silent_session.stage is Stage.START
