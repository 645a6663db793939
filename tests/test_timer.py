"""Tests for the session timer state machine (flowblock/actions/timer.py)."""

import pytest

from flowblock.actions.stats import StatsAggregator
from flowblock.actions.timer import SessionTimer, TimerState
from flowblock.errors import NoActiveSession, NotPaused, SessionAlreadyEnded, SessionNotFound
from flowblock.models import SessionType

ALARM = "flowblock-session-end"


@pytest.fixture()
def timer(repo, alarms, clock):
    return SessionTimer(repo, alarms, StatsAggregator(repo), ALARM, clock)


class TestStartEnd:
    def test_start_sets_current_and_arms_alarm(self, timer, repo, alarms):
        session = timer.start(25)

        assert timer.state() is TimerState.RUNNING
        assert repo.get_current_session().id == session.id
        assert alarms.pending() == {ALARM: 25}
        assert [s.id for s in repo.get_focus_sessions()] == [session.id]

    def test_end_round_trip(self, timer, repo, alarms, clock):
        session = timer.start(25)
        clock.advance(minutes=25)

        ended = timer.end(session.id, completed=True)

        assert ended.completed is True
        assert ended.end_time == clock.now
        assert timer.state() is TimerState.IDLE
        assert alarms.pending() == {}
        assert repo.get_focus_sessions()[0].completed is True

    def test_second_end_fails(self, timer):
        session = timer.start(25)
        timer.end(session.id, completed=True)
        assert timer.remaining() == 0
        with pytest.raises(SessionNotFound):
            timer.end(session.id, completed=True)

    def test_end_unknown_id(self, timer):
        timer.start(25)
        with pytest.raises(SessionNotFound):
            timer.end("nope", completed=True)

    def test_end_without_current(self, timer):
        with pytest.raises(SessionNotFound):
            timer.end("nope", completed=False)

    def test_abandoned_session_earns_no_stats(self, timer, repo, clock):
        session = timer.start(25)
        clock.advance(minutes=10)
        timer.end(session.id, completed=False)
        assert repo.get_stats().sessions_completed == 0

    def test_start_supersedes_current_as_abandoned(self, timer, repo, clock):
        first = timer.start(25)
        clock.advance(minutes=3)
        second = timer.start(50)

        history = {s.id: s for s in repo.get_focus_sessions()}
        assert history[first.id].completed is False
        assert history[first.id].end_time == clock.now
        assert repo.get_current_session().id == second.id

    def test_break_session_type(self, timer):
        session = timer.start(5, SessionType.BREAK)
        assert timer.current().type is SessionType.BREAK
        assert session.duration == 5


class TestRemaining:
    def test_idle_is_zero(self, timer):
        assert timer.remaining() == 0

    def test_counts_down_from_wall_clock(self, timer, clock):
        timer.start(25)
        clock.advance(seconds=90)
        assert timer.remaining() == 25 * 60 - 90

    def test_never_negative(self, timer, clock):
        timer.start(1)
        clock.advance(minutes=5)
        assert timer.remaining() == 0


class TestPauseResume:
    def test_pause_freezes_remaining(self, timer, alarms, clock):
        timer.start(25)
        clock.advance(minutes=10)

        paused = timer.pause()
        clock.advance(minutes=30)

        assert paused.remaining_seconds == 15 * 60
        assert timer.state() is TimerState.PAUSED
        assert timer.remaining() == 15 * 60
        assert alarms.pending() == {}

    def test_resume_rearms_for_remaining(self, timer, alarms, clock):
        timer.start(25)
        clock.advance(minutes=10)
        timer.pause()
        clock.advance(minutes=30)

        timer.resume()

        assert timer.state() is TimerState.RUNNING
        assert alarms.pending() == {ALARM: 15}
        assert timer.remaining() == 15 * 60
        clock.advance(minutes=5)
        assert timer.remaining() == 10 * 60

    def test_pause_twice_returns_same_record(self, timer, clock):
        timer.start(25)
        first = timer.pause()
        clock.advance(minutes=1)
        assert timer.pause() == first

    def test_pause_without_session(self, timer):
        with pytest.raises(NoActiveSession):
            timer.pause()

    def test_no_active_session_is_a_session_not_found(self, timer):
        with pytest.raises(SessionNotFound):
            timer.resume()

    def test_pause_after_time_ran_out(self, timer, clock):
        timer.start(1)
        clock.advance(minutes=2)
        with pytest.raises(SessionAlreadyEnded):
            timer.pause()

    def test_resume_when_running(self, timer):
        timer.start(25)
        with pytest.raises(NotPaused):
            timer.resume()

    def test_end_while_paused_clears_paused_record(self, timer, repo):
        session = timer.start(25)
        timer.pause()
        timer.end(session.id, completed=False)
        assert repo.get_paused_session() is None
        assert timer.state() is TimerState.IDLE


class TestRecover:
    def test_expired_session_is_completed_at_scheduled_end(self, timer, repo, clock):
        session = timer.start(25)
        clock.advance(minutes=90)

        recovered = timer.recover()

        assert recovered.id == session.id
        assert recovered.completed is True
        assert recovered.end_time == session.scheduled_end
        assert repo.get_stats().total_focus_time == 25

    def test_running_session_left_alone(self, timer, clock):
        timer.start(25)
        clock.advance(minutes=5)
        assert timer.recover() is None
        assert timer.state() is TimerState.RUNNING

    def test_paused_session_left_alone(self, timer, clock):
        timer.start(25)
        timer.pause()
        clock.advance(days=1)
        assert timer.recover() is None
        assert timer.state() is TimerState.PAUSED

    def test_nothing_to_recover(self, timer):
        assert timer.recover() is None

    def test_start_after_missed_alarm_credits_previous(self, timer, repo, alarms, clock):
        first = timer.start(25)
        alarms.cancel(ALARM)
        clock.advance(minutes=40)

        second = timer.start(25)

        history = {s.id: s for s in repo.get_focus_sessions()}
        assert history[first.id].completed is True
        assert history[first.id].end_time == first.scheduled_end
        assert repo.get_stats().sessions_completed == 1
        assert repo.get_current_session().id == second.id

    def test_pause_after_missed_alarm_finalises_session(self, timer, repo, clock):
        timer.start(25)
        clock.advance(minutes=30)

        with pytest.raises(SessionAlreadyEnded):
            timer.pause()

        assert timer.state() is TimerState.IDLE
        assert repo.get_stats().total_focus_time == 25

    def test_abandoning_a_run_out_session_still_completes_it(self, timer, repo, clock):
        session = timer.start(25)
        clock.advance(minutes=30)

        ended = timer.end(session.id, completed=False)

        assert ended.completed is True
        assert ended.end_time == session.scheduled_end
        assert repo.get_stats().sessions_completed == 1
