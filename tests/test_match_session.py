"""Tests for the live match session and its manager."""

import threading

import pytest

from scrumsync.errors import MatchNotFound, PlayerNotActive
from scrumsync.models import ClockSignal
from scrumsync.services import ServiceFactory


@pytest.fixture
def session(suite, club, make_lineup):
    session = suite["sessions"].open(club["match"].id)
    session.assign_starting_lineup(make_lineup(club["players"][:2], [9, 10]))
    return session


def run_clock(session, seconds):
    for _ in range(seconds):
        session.tick()


def test_intents_use_current_clock_time(session, club):
    a, b, c = club["players"][:3]
    session.start()
    run_clock(session, 600)

    entry = session.substitute(a.id, c.id)
    assert entry.entered_at_seconds == 600
    assert entry.shirt_number == 9

    run_clock(session, 100)
    event = session.record_stat(c.id, "Try")
    assert (event.elapsed_seconds, event.period) == (700, 1)
    with pytest.raises(PlayerNotActive):
        session.record_stat(a.id, "Tackles")


def test_period_expiry_and_advance_notify_listeners(session):
    events = []
    session.add_listener(lambda name, payload: events.append(name))

    session.start()
    run_clock(session, 2400)
    assert "period_expired" in events
    assert session.tick() is ClockSignal.NONE
    assert session.match.seconds_remaining == 0

    assert session.advance_period() is ClockSignal.PERIOD_ADVANCED
    assert session.match.current_period == 2
    assert session.advance_period() is ClockSignal.MATCH_COMPLETE
    assert events.count("match_complete") == 1
    assert session.timer.clock.current_period == 2


def test_resume_after_expiry_stays_stopped(session):
    events = []
    session.add_listener(lambda name, payload: events.append(name))
    session.start()
    run_clock(session, 2400)

    session.resume()
    assert session.timer.clock.is_running is False
    assert not session.is_ticking
    assert session.tick() is ClockSignal.NONE
    assert events.count("period_expired") == 1


def test_failing_listener_does_not_break_intent(session):
    def broken(name, payload):
        raise RuntimeError("listener bug")

    session.add_listener(broken)
    session.start()
    assert session.timer.clock.is_running


def test_pause_persists_clock(session, suite, club):
    session.start()
    run_clock(session, 90)
    session.pause()

    stored = suite["club"].get_match(club["match"].id)
    assert (stored.current_period, stored.seconds_remaining) == (1, 2310)
    assert session.tick() is ClockSignal.NONE


def test_reopened_session_restores_clock(suite, session, club):
    session.start()
    run_clock(session, 30)
    suite["sessions"].close(club["match"].id)
    assert session.closed

    reopened = suite["sessions"].open(club["match"].id)
    assert reopened is not session
    assert reopened.timer.elapsed_seconds() == 30
    assert reopened.timer.clock.is_running is False


def test_complete_writes_derived_score(session, suite, club):
    a = club["players"][0]
    session.start()
    session.record_stat(a.id, "Try")
    session.record_stat(a.id, "Conversion")

    match = session.complete(opponent_score=3, player_of_match_id=a.id)
    assert (match.home_score, match.away_score) == (7, 3)
    assert match.is_completed
    assert session.closed

    with pytest.raises(ValueError):
        session.record_stat(a.id, "Try")
    with pytest.raises(ValueError):
        suite["sessions"].open(club["match"].id)


def test_complete_away_match_and_negative_score(suite, club, make_lineup):
    club_service = suite["club"]
    match = club_service.create_match(club["team"].id, "Bath", "Rec", is_home=False)
    session = suite["sessions"].open(match.id)
    session.assign_starting_lineup(make_lineup(club["players"][:1], [1]))
    session.record_stat(club["players"][0].id, "Penalty Goal")

    with pytest.raises(ValueError):
        session.complete(opponent_score=-1)
    finished = session.complete(opponent_score=12)
    assert (finished.home_score, finished.away_score) == (12, 2)
    assert finished.club_and_opponent_scores() == {"club": 2, "opponent": 12}


def test_abandon_returns_match_to_kick_off(session, suite, club, make_lineup):
    a, b, c = club["players"][:3]
    match_id = club["match"].id
    session.start()
    run_clock(session, 600)
    session.substitute(a.id, c.id)
    session.record_stat(c.id, "Tackles")
    session.abandon()

    stored = suite["club"].get_match(match_id)
    assert (stored.current_period, stored.seconds_remaining) == (1, 2400)
    assert suite["roster"].roster_entries(match_id) == []
    assert len(suite["ledger"].events_for_match(match_id)) == 0

    reopened = suite["sessions"].open(match_id)
    assert reopened.roster_state()["active"] == []
    reopened.assign_starting_lineup(make_lineup([a, b], [9, 10]))
    reopened.start()
    run_clock(reopened, 10)
    assert reopened.record_stat(a.id, "Tackles").elapsed_seconds == 10
    with pytest.raises(PlayerNotActive):
        reopened.record_stat(c.id, "Tackles")


def test_snapshot_contents(session, club):
    a = club["players"][0]
    session.start()
    run_clock(session, 5)
    session.record_stat(a.id, "Try")

    snapshot = session.snapshot()
    assert snapshot["clock"]["elapsed_seconds"] == 5
    assert snapshot["score"] == {"club": 5, "opponent": 0}
    assert snapshot["team_totals"] == {"Try": 1}
    assert snapshot["player_totals"] == {str(a.id): {"Try": 1}}
    assert [item["shirt_number"] for item in snapshot["roster"]["active"]] == [9, 10]
    assert snapshot["activity"][0]["player_name"] == a.name


def test_manager_rejects_unknown_match(suite):
    with pytest.raises(MatchNotFound):
        suite["sessions"].open(999)


def test_auto_tick_drives_clock():
    services = ServiceFactory(auto_tick=True, tick_interval=0.01).create_complete_service_suite()
    club_service = services["club"]
    team = club_service.create_team("Under 16s", "U16")
    match = club_service.create_match(team.id, "Harlequins", "Home Ground", period_length_min=1)

    session = services["sessions"].open(match.id)
    expired = threading.Event()
    session.add_listener(lambda name, payload: name == "period_expired" and expired.set())
    session.start()
    assert session.is_ticking

    assert expired.wait(5)
    assert session.timer.clock.seconds_remaining == 0
    services["sessions"].close_all()
    assert not session.is_ticking
