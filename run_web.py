#!/usr/bin/env python3
"""
Main entry point for the ScrumSync web application.

This script configures logging and launches the Flask-based API server.
Host, port, log level and the autosave directory come from SCRUMSYNC_HOST,
SCRUMSYNC_PORT, SCRUMSYNC_LOG_LEVEL and SCRUMSYNC_AUTOSAVE_DIR.
"""
import logging
import os

from scrumsync.ui.web_app import run_web_app

if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("SCRUMSYNC_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_app(
        host=os.environ.get("SCRUMSYNC_HOST", "127.0.0.1"),
        port=int(os.environ.get("SCRUMSYNC_PORT", "7122")),
        config={"AUTOSAVE_DIR": os.environ.get("SCRUMSYNC_AUTOSAVE_DIR")},
    )
