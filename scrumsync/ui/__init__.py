"""
UI package for the ScrumSync match tracker.

This package contains the Flask web server exposing the JSON API used by
the live match screen and the club management pages.
"""
from .web_app import WebAppState, create_app, run_web_app

__all__ = ["WebAppState", "create_app", "run_web_app"]
