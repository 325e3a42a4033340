"""
Constants for the ScrumSync match tracker.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "ScrumSync"

# Match timing defaults
DEFAULT_PERIOD_LENGTH_MIN = 40
DEFAULT_PERIOD_COUNT = 2
ALLOWED_PERIOD_COUNTS = (2, 4)
MIN_PERIOD_LENGTH_MIN = 1
MAX_PERIOD_LENGTH_MIN = 60

# Seconds between clock ticks driven by the match session
TICK_INTERVAL_SECONDS = 1.0

# Live activity feed length on the match screen
ACTIVITY_LOG_LIMIT = 100

PERIOD_LABELS = {
    2: ["First Half", "Second Half"],
    4: ["First Quarter", "Second Quarter", "Third Quarter", "Fourth Quarter"],
}

# Points awarded per scoring stat type
TRY_POINTS = 5
CONVERSION_POINTS = 2
PENALTY_GOAL_POINTS = 2
FIELD_GOAL_POINTS = 1

# Stat types seeded into a fresh registry
DEFAULT_STAT_TYPES = [
    # General
    {"name": "Tackles", "description": "Successful tackles made", "color": "#2563EB", "icon": "sports_kabaddi"},
    {"name": "Carries", "description": "Ball carries", "color": "#16A34A", "icon": "directions_run"},
    {"name": "Meters", "description": "Meters gained", "color": "#CA8A04", "icon": "straighten"},
    {"name": "Passes", "description": "Successful passes made", "color": "#4F46E5", "icon": "sports_handball"},
    # Scoring
    {"name": "Try", "description": "Try scored (5 points)", "color": "#9333EA", "icon": "emoji_events",
     "scoring_points": TRY_POINTS},
    {"name": "Conversion", "description": "Conversion kick (2 points)", "color": "#DC2626", "icon": "sports_soccer",
     "scoring_points": CONVERSION_POINTS},
    {"name": "Penalty Goal", "description": "Penalty kick (2 points)", "color": "#E11D48", "icon": "gps_fixed",
     "scoring_points": PENALTY_GOAL_POINTS},
    {"name": "Field Goal", "description": "Field goal (1 point)", "color": "#FB923C", "icon": "sports",
     "scoring_points": FIELD_GOAL_POINTS},
    # Discipline
    {"name": "Yellow Card", "description": "Player sin-binned for 10 minutes", "color": "#FBBF24", "icon": "credit_card"},
    {"name": "Red Card", "description": "Player sent off for the remainder of the game", "color": "#B91C1C",
     "icon": "credit_card"},
    # Errors and penalties
    {"name": "Penalty Conceded", "description": "Penalty given away", "color": "#64748B", "icon": "flag"},
    {"name": "Error", "description": "Handling error or mistake", "color": "#94A3B8", "icon": "error"},
]
