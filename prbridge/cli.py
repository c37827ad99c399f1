#!/usr/bin/env python3
"""
PRBridge runner for GitHub Actions (one event per invocation).

Reads the event the workflow was triggered by, runs the matching sync
workflow and prints the result as JSON.

Environment:
- GITHUB_EVENT_NAME / GITHUB_EVENT_PATH    # set by the Actions runner
- BACKLOG_HOST, BACKLOG_API_KEY, GITHUB_TOKEN  # required
- FIX_STATUS_ID, CLOSE_STATUS_ID, ADD_COMMENT, UPDATE_STATUS_ON_MERGE,
  MARKER_TARGET, BOT_LOGIN, LOG_LEVEL          # optional, see prbridge.config

Run:
  prbridge --event-name pull_request --event-path event.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional, Sequence

from prbridge.config import Settings
from prbridge.dispatch import EventDispatcher
from prbridge.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _fail(msg: str) -> int:
    # GitHub Actions workflow command: marks the step as failed with this message.
    print(f"::error::{msg}")
    return 1


def _load_event(path: str) -> dict:
    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError(f"Event payload in {path} is not a JSON object")
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prbridge", description="Sync a GitHub pull request event with Backlog"
    )
    parser.add_argument(
        "--event-name",
        default=os.getenv("GITHUB_EVENT_NAME"),
        help="Event name (default: $GITHUB_EVENT_NAME)",
    )
    parser.add_argument(
        "--event-path",
        default=os.getenv("GITHUB_EVENT_PATH"),
        help="Path to the event payload JSON (default: $GITHUB_EVENT_PATH)",
    )
    return parser


def run(
    argv: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
    dispatcher: Optional[EventDispatcher] = None,
) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if not args.event_name or not args.event_path:
            raise ConfigurationError(
                "Event name and event path are required (GITHUB_EVENT_NAME / GITHUB_EVENT_PATH)"
            )
        payload = _load_event(args.event_path)
        dispatcher = dispatcher or EventDispatcher.from_settings(settings)
        try:
            result = dispatcher.dispatch(args.event_name, payload)
        finally:
            dispatcher.close()
    except Exception as e:
        logger.error(f"Run failed: {e}")
        return _fail(str(e) or "An unexpected error occurred")

    print(json.dumps(result, indent=2, ensure_ascii=False))
    logger.info("Action completed successfully")
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
