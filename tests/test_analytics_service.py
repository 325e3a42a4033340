"""Tests for event-derived totals, scores and reports."""

import csv
import io
from unittest.mock import patch

import pytest

from scrumsync.services import summarize_events


@pytest.fixture
def scored_match(suite, club, make_lineup):
    """Three events: Try for X, 3 Tackles for X, Try for Y."""
    ledger = suite["ledger"]
    match_id = club["match"].id
    x, y = club["players"][:2]
    suite["roster"].assign_starting_lineup(match_id, make_lineup([x, y], [9, 10]))
    ledger.record(match_id, x.id, "Try", 1, 120, 1)
    ledger.record(match_id, x.id, "Tackles", 3, 300, 1)
    ledger.record(match_id, y.id, "Try", 1, 2500, 2)
    return match_id, x, y


def test_team_and_player_totals(suite, scored_match):
    analytics = suite["analytics"]
    match_id, x, y = scored_match

    assert analytics.team_totals(match_id) == {"Try": 2, "Tackles": 3}
    assert analytics.player_totals(match_id, x.id) == {"Try": 1, "Tackles": 3}
    assert analytics.player_totals(match_id, y.id) == {"Try": 1}
    assert analytics.derived_score(match_id) == 10


def test_totals_equal_fresh_fold_over_events(suite, scored_match):
    analytics = suite["analytics"]
    ledger = suite["ledger"]
    match_id, x, _ = scored_match

    ledger.record(match_id, x.id, "Conversion", 1, 130, 1)
    ledger.record(match_id, x.id, "Penalty Goal", 1, 900, 1)

    events = list(ledger.events_for_match(match_id))
    assert analytics.aggregate_view(match_id) == summarize_events(events)

    expected_team = {}
    for event in events:
        expected_team[event.stat_type_name] = expected_team.get(event.stat_type_name, 0) + event.value
    assert analytics.team_totals(match_id) == expected_team
    assert analytics.derived_score(match_id) == 5 + 5 + 2 + 2


def test_per_period_figures(suite, scored_match):
    analytics = suite["analytics"]
    match_id, x, y = scored_match

    assert analytics.team_totals(match_id, period=1) == {"Try": 1, "Tackles": 3}
    assert analytics.derived_score(match_id, period=2) == 5
    assert analytics.player_totals(match_id, y.id, period=1) == {}


def test_deactivated_scoring_type_still_counts(suite, scored_match):
    registry = suite["registry"]
    match_id, _, _ = scored_match

    registry.deactivate(registry.get_by_name("Try").id)
    assert suite["analytics"].derived_score(match_id) == 10


def test_stat_leaders_and_points(suite, scored_match):
    analytics = suite["analytics"]
    match_id, x, y = scored_match

    leaders = {leader.stat_type_name: leader for leader in analytics.stat_leaders(match_id)}
    assert leaders["Tackles"].player_id == x.id
    assert leaders["Tackles"].value == 3
    # Tie on tries goes to the lower player id
    assert leaders["Try"].player_id == min(x.id, y.id)
    assert analytics.player_points(match_id) == {x.id: 5, y.id: 5}


def test_match_report_and_csv(suite, scored_match):
    analytics = suite["analytics"]
    match_id, x, y = scored_match

    with patch("scrumsync.services.analytics_service.now_ts", return_value=1000):
        report = analytics.generate_match_report(match_id, elapsed_seconds=3000)

    assert report.generated_ts == 1000
    assert report.club_score == 10
    assert report.event_count == 3
    assert report.opponent == "Harlequins"
    lines = {line.player_id: line for line in report.players}
    assert lines[x.id].shirt_number == 9
    assert lines[x.id].seconds_played == 3000
    assert lines[x.id].points == 5
    assert lines[x.id].on_field is True

    rows = list(csv.reader(io.StringIO(analytics.generate_report_csv(report))))
    assert rows[0] == ["Player", "Shirt", "Position", "Minutes Played", "Points", "Tackles", "Try"]
    assert rows[1][:2] == [x.name, "9"]
    assert rows[1][3] == "50.0"
    assert rows[-1] == ["Team", "", "", "", "10", "3", "2"]


def test_season_totals_and_record(suite, club, make_lineup, scored_match):
    analytics = suite["analytics"]
    club_service = suite["club"]
    sessions = suite["sessions"]
    team = club["team"]
    first_id, x, y = scored_match

    sessions.open(first_id).complete(opponent_score=3)

    second = club_service.create_match(team.id, "Bath", "Rec", is_home=False)
    session = sessions.open(second.id)
    session.assign_starting_lineup(make_lineup([x], [9]))
    session.record_stat(x.id, "Tackles", 4)
    session.complete(opponent_score=7)

    third = club_service.create_match(team.id, "Wasps", "Home Ground")
    session = sessions.open(third.id)
    session.assign_starting_lineup(make_lineup([y], [10]))
    session.record_stat(y.id, "Penalty Goal")

    other_team = club_service.create_team("Under 18s", "U18")
    club_service.create_match(other_team.id, "Gloucester", "Away Park")

    record = analytics.season_record(team.id)
    assert (record.played, record.wins, record.losses, record.draws) == (2, 1, 1, 0)
    assert (record.points_for, record.points_against) == (10, 10)

    summary = analytics.season_summary(team.id)
    assert summary.match_count == 3
    assert summary.team_totals == {"Try": 2, "Tackles": 7, "Penalty Goal": 1}
    assert summary.player_totals == {x.id: {"Try": 1, "Tackles": 7}, y.id: {"Try": 1, "Penalty Goal": 1}}
    leaders = {leader.stat_type_name: leader.player_id for leader in summary.leaders}
    assert leaders == {"Penalty Goal": y.id, "Tackles": x.id, "Try": min(x.id, y.id)}

    assert analytics.season_summary().match_count == 4
    assert analytics.season_summary(other_team.id).team_totals == {}
    assert analytics.season_record(other_team.id).played == 0
