"""
Web application module for the ScrumSync match tracker.

This module contains the Flask server exposing JSON API endpoints for club
management and for running live matches: lineup, substitutions, stat
recording, clock control and event-derived totals.
"""
import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

from ..errors import MatchNotFound, MatchStateError
from ..models import LineupSlot
from ..services import PersistenceService, ServiceFactory
from ..services.persistence_service import InMemoryRepository
from ..utils import APP_TITLE, TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

TEAM_FIELDS = {"name", "age_group", "description", "is_active"}
PLAYER_FIELDS = {"name", "number", "position", "date_of_birth", "team_id", "email", "phone", "notes", "is_active"}
FIXTURE_FIELDS = {"team_id", "opponent", "date", "location", "is_home", "notes"}
MATCH_FIELDS = {
    "team_id", "opponent", "location", "date", "period_length_min",
    "number_of_periods", "fixture_id", "is_home",
}
MATCH_UPDATE_FIELDS = MATCH_FIELDS | {
    "home_score", "away_score", "is_completed", "player_of_match_id", "player_of_match_comment",
}
STAT_TYPE_FIELDS = {"name", "description", "color", "icon", "scoring_points", "is_active"}


class WebAppState:
    """
    State holder for the web application.

    Builds every service around one repository through the service factory.
    """

    def __init__(
        self,
        repository: Optional[InMemoryRepository] = None,
        auto_tick: bool = True,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self.auto_tick = auto_tick
        self.tick_interval = tick_interval
        self._build(repository)

    def _build(self, repository: Optional[InMemoryRepository]) -> None:
        self.service_factory = ServiceFactory(
            repository=repository,
            auto_tick=self.auto_tick,
            tick_interval=self.tick_interval,
        )
        services = self.service_factory.create_complete_service_suite()
        self.repository = services['repository']
        self.registry = services['registry']
        self.roster_service = services['roster']
        self.ledger = services['ledger']
        self.analytics_service = services['analytics']
        self.club_service = services['club']
        self.sessions = services['sessions']
        self.persistence_service = services['persistence']

    def reset_services(self, repository: InMemoryRepository) -> None:
        """Swap in a loaded repository, closing every live session first."""
        self.sessions.close_all()
        self._build(repository)


def _pick(data: Dict[str, Any], allowed: set) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key in allowed}


def _failure(exc: Exception):
    """Map an exception to the JSON error envelope and status code."""
    if isinstance(exc, MatchNotFound):
        return jsonify({"success": False, "error": str(exc)}), 404
    if isinstance(exc, (MatchStateError, ValueError, TypeError)):
        logger.warning("Rejected request: %s", exc)
        body = {"success": False, "error": str(exc), "error_type": type(exc).__name__}
        return jsonify(body), 400
    logger.exception("Unexpected error handling request")
    return jsonify({"success": False, "error": str(exc)}), 500


def _not_found(entity: str):
    return jsonify({"success": False, "error": f"{entity} not found"}), 404


def create_app(config: Optional[Dict[str, Any]] = None, state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        config: Flask config overrides (``AUTO_TICK``, ``TICK_INTERVAL``, ``AUTOSAVE_DIR``)
        state: Pre-built application state, mainly for tests

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.update(AUTO_TICK=True, TICK_INTERVAL=TICK_INTERVAL_SECONDS, AUTOSAVE_DIR=None)
    if config:
        app.config.update(config)

    app_state = state or WebAppState(
        auto_tick=app.config["AUTO_TICK"],
        tick_interval=app.config["TICK_INTERVAL"],
    )
    app.extensions["scrumsync"] = app_state

    def _json_body() -> Dict[str, Any]:
        return request.get_json(silent=True) or {}

    def _period_arg() -> Optional[int]:
        period = request.args.get("period")
        return int(period) if period not in (None, "") else None

    @app.route("/")
    def index():
        return jsonify({"name": APP_TITLE, "success": True})

    # ==================== Teams ==================== #

    @app.route("/api/teams", methods=["GET"])
    def list_teams():
        return jsonify([team.to_dict() for team in app_state.club_service.list_teams()])

    @app.route("/api/teams", methods=["POST"])
    def create_team():
        try:
            data = _json_body()
            team = app_state.club_service.create_team(
                data.get("name", ""), data.get("age_group", ""), data.get("description")
            )
            return jsonify(team.to_dict()), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/teams/<int:team_id>", methods=["GET"])
    def get_team(team_id: int):
        team = app_state.club_service.get_team(team_id)
        if team is None:
            return _not_found("Team")
        return jsonify(team.to_dict())

    @app.route("/api/teams/<int:team_id>", methods=["PUT"])
    def update_team(team_id: int):
        try:
            team = app_state.club_service.update_team(team_id, **_pick(_json_body(), TEAM_FIELDS))
            if team is None:
                return _not_found("Team")
            return jsonify(team.to_dict())
        except Exception as e:
            return _failure(e)

    @app.route("/api/teams/<int:team_id>", methods=["DELETE"])
    def delete_team(team_id: int):
        if not app_state.club_service.delete_team(team_id):
            return _not_found("Team")
        return "", 204

    @app.route("/api/teams/<int:team_id>/players", methods=["GET"])
    def list_team_players(team_id: int):
        return jsonify([p.to_dict() for p in app_state.club_service.list_players(team_id=team_id)])

    @app.route("/api/teams/<int:team_id>/fixtures", methods=["GET"])
    def list_team_fixtures(team_id: int):
        return jsonify([f.to_dict() for f in app_state.club_service.list_fixtures(team_id=team_id)])

    @app.route("/api/teams/<int:team_id>/matches", methods=["GET"])
    def list_team_matches(team_id: int):
        return jsonify([m.to_dict() for m in app_state.club_service.list_matches(team_id=team_id)])

    # ==================== Players ==================== #

    @app.route("/api/players", methods=["GET"])
    def list_players():
        return jsonify([player.to_dict() for player in app_state.club_service.list_players()])

    @app.route("/api/players", methods=["POST"])
    def create_player():
        try:
            data = _pick(_json_body(), PLAYER_FIELDS)
            name = data.pop("name", "")
            player = app_state.club_service.create_player(name, **data)
            return jsonify(player.to_dict()), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/players/<int:player_id>", methods=["GET"])
    def get_player(player_id: int):
        player = app_state.club_service.get_player(player_id)
        if player is None:
            return _not_found("Player")
        return jsonify(player.to_dict())

    @app.route("/api/players/<int:player_id>", methods=["PUT"])
    def update_player(player_id: int):
        try:
            player = app_state.club_service.update_player(player_id, **_pick(_json_body(), PLAYER_FIELDS))
            if player is None:
                return _not_found("Player")
            return jsonify(player.to_dict())
        except Exception as e:
            return _failure(e)

    @app.route("/api/players/<int:player_id>", methods=["DELETE"])
    def delete_player(player_id: int):
        try:
            if not app_state.club_service.delete_player(player_id):
                return _not_found("Player")
            return "", 204
        except Exception as e:
            return _failure(e)

    # ==================== Fixtures ==================== #

    @app.route("/api/fixtures", methods=["GET"])
    def list_fixtures():
        return jsonify([f.to_dict() for f in app_state.club_service.list_fixtures()])

    @app.route("/api/fixtures", methods=["POST"])
    def create_fixture():
        try:
            data = _pick(_json_body(), FIXTURE_FIELDS)
            fixture = app_state.club_service.create_fixture(
                team_id=data.get("team_id"),
                opponent=data.get("opponent", ""),
                date=data.get("date"),
                location=data.get("location", ""),
                is_home=data.get("is_home", True),
                notes=data.get("notes"),
            )
            return jsonify(fixture.to_dict()), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/fixtures/<int:fixture_id>", methods=["GET"])
    def get_fixture(fixture_id: int):
        fixture = app_state.club_service.get_fixture(fixture_id)
        if fixture is None:
            return _not_found("Fixture")
        return jsonify(fixture.to_dict())

    @app.route("/api/fixtures/<int:fixture_id>", methods=["PUT"])
    def update_fixture(fixture_id: int):
        try:
            fixture = app_state.club_service.update_fixture(fixture_id, **_pick(_json_body(), FIXTURE_FIELDS))
            if fixture is None:
                return _not_found("Fixture")
            return jsonify(fixture.to_dict())
        except Exception as e:
            return _failure(e)

    @app.route("/api/fixtures/<int:fixture_id>", methods=["DELETE"])
    def delete_fixture(fixture_id: int):
        if not app_state.club_service.delete_fixture(fixture_id):
            return _not_found("Fixture")
        return "", 204

    @app.route("/api/fixtures/<int:fixture_id>/match", methods=["POST"])
    def create_match_from_fixture(fixture_id: int):
        """Turn a fixture into a match ready to play."""
        try:
            data = _json_body()
            match = app_state.club_service.create_match_from_fixture(
                fixture_id,
                period_length_min=int(data.get("period_length_min", 40)),
                number_of_periods=int(data.get("number_of_periods", 2)),
            )
            return jsonify(match.to_dict()), 201
        except Exception as e:
            return _failure(e)

    # ==================== Matches ==================== #

    @app.route("/api/matches", methods=["GET"])
    def list_matches():
        return jsonify([m.to_dict() for m in app_state.club_service.list_matches()])

    @app.route("/api/matches", methods=["POST"])
    def create_match():
        try:
            data = _pick(_json_body(), MATCH_FIELDS)
            match = app_state.club_service.create_match(
                team_id=data.get("team_id"),
                opponent=data.get("opponent", ""),
                location=data.get("location", ""),
                date=data.get("date"),
                period_length_min=int(data.get("period_length_min", 40)),
                number_of_periods=int(data.get("number_of_periods", 2)),
                fixture_id=data.get("fixture_id"),
                is_home=data.get("is_home", True),
            )
            return jsonify(match.to_dict()), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>", methods=["GET"])
    def get_match(match_id: int):
        try:
            return jsonify(app_state.club_service.get_match(match_id).to_dict())
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>", methods=["PUT"])
    def update_match(match_id: int):
        try:
            match = app_state.club_service.update_match(match_id, **_pick(_json_body(), MATCH_UPDATE_FIELDS))
            if match is None:
                return _not_found("Match")
            return jsonify(match.to_dict())
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>", methods=["DELETE"])
    def delete_match(match_id: int):
        app_state.sessions.close(match_id)
        if not app_state.club_service.delete_match(match_id):
            return _not_found("Match")
        return "", 204

    # ==================== Live match ==================== #

    @app.route("/api/matches/<int:match_id>/state", methods=["GET"])
    def get_match_state(match_id: int):
        """Everything the live match screen renders."""
        try:
            session = app_state.sessions.open(match_id)
            return jsonify({"success": True, "state": session.snapshot()})
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/roster", methods=["GET"])
    def get_roster(match_id: int):
        try:
            app_state.club_service.get_match(match_id)
            return jsonify({
                "success": True,
                "active": [e.to_dict() for e in app_state.roster_service.active_players(match_id)],
                "bench": [p.to_dict() for p in app_state.roster_service.bench_players(match_id)],
                "entries": [e.to_dict() for e in app_state.roster_service.roster_entries(match_id)],
            })
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/lineup", methods=["POST"])
    def assign_lineup(match_id: int):
        try:
            data = _json_body()
            slots = [
                LineupSlot(
                    player_id=int(item["player_id"]),
                    shirt_number=int(item["shirt_number"]),
                    position_label=item.get("position_label", ""),
                )
                for item in data.get("players", [])
            ]
            if not slots:
                return jsonify({"success": False, "error": "players list required"}), 400
            entries = app_state.sessions.open(match_id).assign_starting_lineup(slots)
            return jsonify({"success": True, "entries": [e.to_dict() for e in entries]}), 201
        except (KeyError, TypeError) as e:
            return jsonify({"success": False, "error": f"Invalid lineup entry: {e}"}), 400
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/substitutions", methods=["POST"])
    def make_substitution(match_id: int):
        """Substitute at the current clock time."""
        try:
            data = _json_body()
            out_id = data.get("out_player_id")
            in_id = data.get("in_player_id")
            if out_id is None or in_id is None:
                return jsonify({"success": False, "error": "Both out_player_id and in_player_id required"}), 400

            entry = app_state.sessions.open(match_id).substitute(int(out_id), int(in_id))
            return jsonify({"success": True, "entry": entry.to_dict()})
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/stats", methods=["GET"])
    def list_stats(match_id: int):
        try:
            app_state.club_service.get_match(match_id)
            player_id = request.args.get("player_id")
            if player_id:
                events = app_state.ledger.events_for_player(match_id, int(player_id), period=_period_arg())
            else:
                events = app_state.ledger.events_for_match(match_id, period=_period_arg())
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/stats", methods=["POST"])
    def record_stat(match_id: int):
        """Record a stat for an on-field player at the current clock time."""
        try:
            data = _json_body()
            if data.get("player_id") is None or not data.get("stat_type_name"):
                return jsonify({"success": False, "error": "player_id and stat_type_name required"}), 400
            event = app_state.sessions.open(match_id).record_stat(
                int(data["player_id"]), data["stat_type_name"], data.get("value", 1)
            )
            return jsonify({"success": True, "event": event.to_dict()}), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/clock/<action>", methods=["POST"])
    def control_clock(match_id: int, action: str):
        """Drive the match clock: start, pause, resume, tick, advance or abandon."""
        try:
            session = app_state.sessions.open(match_id)
            signal = None
            if action == "start":
                session.start()
            elif action == "pause":
                session.pause()
            elif action == "resume":
                session.resume()
            elif action == "tick":
                signal = session.tick()
            elif action == "advance":
                signal = session.advance_period()
            elif action == "abandon":
                session.abandon()
            else:
                return jsonify({"success": False, "error": f"Unknown clock action: {action}"}), 404
            return jsonify({
                "success": True,
                "signal": signal.value if signal is not None else None,
                "clock": session.timer.get_clock_state(),
            })
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/totals", methods=["GET"])
    def get_totals(match_id: int):
        try:
            app_state.club_service.get_match(match_id)
            period = _period_arg()
            analytics = app_state.analytics_service
            return jsonify({
                "success": True,
                "period": period,
                "team_totals": analytics.team_totals(match_id, period),
                "player_totals": {
                    str(pid): totals for pid, totals in analytics.aggregate_view(match_id, period).items()
                },
                "score": analytics.derived_score(match_id, period),
                "leaders": [asdict(leader) for leader in analytics.stat_leaders(match_id, period)],
            })
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/players/<int:player_id>/totals", methods=["GET"])
    def get_player_totals(match_id: int, player_id: int):
        try:
            app_state.club_service.get_match(match_id)
            totals = app_state.analytics_service.player_totals(match_id, player_id, _period_arg())
            return jsonify({"success": True, "player_id": player_id, "totals": totals})
        except Exception as e:
            return _failure(e)

    def _build_report(match_id: int):
        match = app_state.club_service.get_match(match_id)
        session = app_state.sessions.get(match_id)
        if session is not None:
            elapsed = session.timer.elapsed_seconds()
        else:
            remaining = match.seconds_remaining if match.seconds_remaining is not None else match.period_length_seconds
            elapsed = (match.current_period - 1) * match.period_length_seconds + (match.period_length_seconds - remaining)
        return app_state.analytics_service.generate_match_report(match_id, elapsed, _period_arg())

    @app.route("/api/matches/<int:match_id>/report", methods=["GET"])
    def get_match_report(match_id: int):
        try:
            report = _build_report(match_id)
            return jsonify({
                "success": True,
                "report": {
                    "match_id": report.match_id,
                    "opponent": report.opponent,
                    "period": report.period,
                    "elapsed_seconds": report.elapsed_seconds,
                    "club_score": report.club_score,
                    "opponent_score": report.opponent_score,
                    "event_count": report.event_count,
                    "team_totals": report.team_totals,
                    "players": [asdict(line) for line in report.players],
                    "leaders": [asdict(leader) for leader in report.leaders],
                },
            })
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/report.csv", methods=["GET"])
    def export_match_report(match_id: int):
        try:
            report = _build_report(match_id)
            csv_content = app_state.analytics_service.generate_report_csv(report)
            return Response(
                csv_content,
                mimetype="text/csv",
                headers={"Content-Disposition": f"attachment; filename=match_{match_id}_report.csv"},
            )
        except Exception as e:
            return _failure(e)

    @app.route("/api/analytics/season", methods=["GET"])
    def get_season_summary():
        """Totals and win/loss/draw record across a team's matches (all teams without team_id)."""
        try:
            team_id = request.args.get("team_id", type=int)
            if team_id is not None and app_state.club_service.get_team(team_id) is None:
                return _not_found("Team")
            summary = asdict(app_state.analytics_service.season_summary(team_id))
            summary["player_totals"] = {str(pid): totals for pid, totals in summary["player_totals"].items()}
            return jsonify({"success": True, "season": summary})
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/complete", methods=["POST"])
    def complete_match(match_id: int):
        try:
            data = _json_body()
            match = app_state.sessions.open(match_id).complete(
                opponent_score=int(data.get("opponent_score", 0)),
                player_of_match_id=data.get("player_of_match_id"),
                player_of_match_comment=data.get("player_of_match_comment"),
            )
            app_state.sessions.close(match_id)
            autosave = None
            if app.config["AUTOSAVE_DIR"]:
                path = PersistenceService.auto_save(app_state.repository, app.config["AUTOSAVE_DIR"])
                autosave = os.path.basename(path) if path else None
            return jsonify({"success": True, "match": match.to_dict(), "autosave": autosave})
        except Exception as e:
            return _failure(e)

    @app.route("/api/matches/<int:match_id>/close", methods=["POST"])
    def close_session(match_id: int):
        """Leave the live screen: stop the ticker, keep the clock position."""
        app_state.sessions.close(match_id)
        return jsonify({"success": True})

    # ==================== Stat types ==================== #

    @app.route("/api/stat-types", methods=["GET"])
    def list_stat_types():
        include_inactive = request.args.get("all") in ("1", "true")
        return jsonify([s.to_dict() for s in app_state.registry.list_stat_types(include_inactive)])

    @app.route("/api/stat-types", methods=["POST"])
    def create_stat_type():
        try:
            data = _pick(_json_body(), STAT_TYPE_FIELDS)
            stat_type = app_state.registry.create_stat_type(**data)
            return jsonify(stat_type.to_dict()), 201
        except Exception as e:
            return _failure(e)

    @app.route("/api/stat-types/<int:stat_type_id>", methods=["PUT"])
    def update_stat_type(stat_type_id: int):
        try:
            stat_type = app_state.registry.update_stat_type(stat_type_id, **_pick(_json_body(), STAT_TYPE_FIELDS))
            if stat_type is None:
                return _not_found("Stat type")
            return jsonify(stat_type.to_dict())
        except Exception as e:
            return _failure(e)

    # ==================== Save / load ==================== #

    @app.route("/api/save", methods=["POST"])
    def save_data():
        """Return the whole repository as JSON for client-side saving."""
        try:
            data = PersistenceService.serialize_repository(app_state.repository)
            return jsonify({"success": True, "data": data})
        except Exception as e:
            return _failure(e)

    @app.route("/api/load", methods=["POST"])
    def load_data():
        """Replace the repository with uploaded JSON."""
        try:
            payload = _json_body().get("data")
            if not payload:
                return jsonify({"success": False, "error": "No data provided"}), 400
            app_state.reset_services(PersistenceService.deserialize_repository(payload))
            return jsonify({"success": True, "message": "Data loaded successfully"})
        except Exception as e:
            return _failure(e)

    @app.route("/api/saves", methods=["GET"])
    def list_saves():
        """Autosaves written when matches complete, newest first."""
        save_dir = app.config["AUTOSAVE_DIR"]
        saves = PersistenceService.get_recent_saves(save_dir) if save_dir else []
        return jsonify({
            "success": True,
            "saves": [{"filename": name, "modified": modified} for name, modified in saves],
        })

    @app.route("/api/saves/<filename>/load", methods=["POST"])
    def load_save(filename: str):
        save_dir = app.config["AUTOSAVE_DIR"]
        if not save_dir or filename != os.path.basename(filename):
            return _not_found("Save file")
        try:
            repository = PersistenceService.load_from_file(os.path.join(save_dir, filename))
        except FileNotFoundError:
            return _not_found("Save file")
        except Exception as e:
            return _failure(e)
        app_state.reset_services(repository)
        return jsonify({"success": True, "message": f"Loaded {filename}"})

    return app


def run_web_app(host: str = "127.0.0.1", port: int = 7122, config: Optional[Dict[str, Any]] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        config: Flask config overrides
    """
    app = create_app(config)
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        app.extensions["scrumsync"].sessions.close_all()


if __name__ == "__main__":
    run_web_app(
        host=os.environ.get("SCRUMSYNC_HOST", "127.0.0.1"),
        port=int(os.environ.get("SCRUMSYNC_PORT", "7122")),
    )
