"""Tests for the blocking decision engine and temporary breaks."""

import pytest

from flowblock.blocking.breaks import BreakRegistry
from flowblock.blocking.engine import BlockingEngine, Verdict
from flowblock.storage.repository import Keys


@pytest.fixture()
def breaks(repo, clock):
    return BreakRegistry(repo, clock)


@pytest.fixture()
def engine(repo, breaks, clock):
    return BlockingEngine(repo, breaks, clock)


class TestDecide:
    def test_listed_subdomain_is_denied_and_counted(self, repo, engine):
        site = repo.add_blocked_site("facebook.com")

        decision = engine.decide("https://m.facebook.com/x")

        assert decision.verdict is Verdict.DENY
        assert decision.reason == "blocked"
        assert decision.site_id == site.id
        assert repo.get_blocked_sites()[0].block_count == 1
        assert repo.get_stats().total_blocks == 1

    def test_fresh_break_allows(self, repo, engine, breaks):
        repo.add_blocked_site("facebook.com")
        breaks.grant("facebook.com", 300)

        decision = engine.decide("https://facebook.com/")

        assert decision.verdict is Verdict.ALLOW
        assert decision.reason == "temporary_break"
        assert repo.get_blocked_sites()[0].block_count == 0

    def test_break_does_not_cover_subdomains(self, repo, engine, breaks):
        repo.add_blocked_site("facebook.com")
        breaks.grant("facebook.com", 300)
        assert engine.decide("https://m.facebook.com/").verdict is Verdict.DENY

    def test_unlisted_domain_allowed(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        decision = engine.decide("https://docs.python.org/3/")
        assert decision.verdict is Verdict.ALLOW
        assert decision.reason == "not_listed"
        assert repo.get_stats().total_blocks == 0

    def test_invalid_url_allowed(self, engine):
        decision = engine.decide("chrome://")
        assert decision.verdict is Verdict.ALLOW
        assert decision.reason == "invalid_url"

    def test_global_switch_off_allows(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        repo.update_settings({"enabled": False})
        decision = engine.decide("https://facebook.com/")
        assert decision.reason == "disabled"
        assert not decision.denied

    def test_outside_schedule_allows(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        # Only Mondays; the clock says Wednesday
        repo.add_schedule_slot(1, "09:00", "17:00")
        schedule = repo.get_weekly_schedule()
        schedule.enabled = True
        repo.save_weekly_schedule(schedule)

        decision = engine.decide("https://facebook.com/")
        assert decision.reason == "outside_schedule"

    def test_inside_schedule_blocks(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        repo.add_schedule_slot(3, "09:00", "17:00")
        schedule = repo.get_weekly_schedule()
        schedule.enabled = True
        repo.save_weekly_schedule(schedule)

        assert engine.decide("https://facebook.com/").denied

    def test_malformed_schedule_keeps_blocking(self, store, repo, engine):
        repo.add_blocked_site("facebook.com")
        store.set(Keys.WEEKLY_SCHEDULE, {"enabled": True, "slots": [{"start_time": "09:00"}]})
        assert engine.decide("https://facebook.com/").denied


class TestCounters:
    def test_repeat_denies_count_each_time(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        for _ in range(3):
            engine.decide("https://facebook.com/")
        assert repo.get_blocked_sites()[0].block_count == 3
        assert repo.get_stats().total_blocks == 3

    def test_only_first_matching_entry_is_counted(self, repo, engine):
        exact = repo.add_blocked_site("reddit.com")
        wildcard = repo.add_blocked_site("*.reddit.com")

        decision = engine.decide("https://old.reddit.com/")

        counts = {s.id: s.block_count for s in repo.get_blocked_sites()}
        assert decision.site_id == exact.id
        assert counts == {exact.id: 1, wildcard.id: 0}

    def test_evaluate_does_not_count(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        assert engine.evaluate("https://facebook.com/").denied
        assert repo.get_blocked_sites()[0].block_count == 0
        assert repo.get_stats().total_blocks == 0


class TestBreakRegistry:
    def test_grant_returns_expiry(self, breaks, clock):
        assert breaks.grant("facebook.com", 300) == clock.now + 300

    def test_break_expires_and_is_pruned(self, repo, breaks, clock):
        breaks.grant("facebook.com", 300)
        clock.advance(seconds=300)

        assert not breaks.is_exempt("facebook.com")
        assert "facebook.com" not in repo.get_temporary_breaks()

    def test_regrant_overwrites(self, breaks, clock):
        breaks.grant("facebook.com", 60)
        breaks.grant("facebook.com", 600)
        clock.advance(seconds=120)
        assert breaks.is_exempt("facebook.com")

    def test_active_lists_only_unexpired(self, breaks, clock):
        breaks.grant("facebook.com", 60)
        breaks.grant("youtube.com", 600)
        clock.advance(seconds=120)
        assert list(breaks.active()) == ["youtube.com"]

    def test_expired_break_blocks_again(self, repo, engine, breaks, clock):
        repo.add_blocked_site("facebook.com")
        breaks.grant("facebook.com", 300)
        clock.advance(minutes=6)
        assert engine.decide("https://facebook.com/").denied


class TestIdempotence:
    def test_same_state_same_verdict(self, repo, engine):
        repo.add_blocked_site("facebook.com")
        first = engine.decide("https://facebook.com/")
        second = engine.decide("https://facebook.com/")
        assert (first.verdict, first.reason) == (second.verdict, second.reason)
