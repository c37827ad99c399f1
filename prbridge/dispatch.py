"""Route pull_request events to the sync workflows"""

import logging
from typing import Any, Dict

from prbridge.config import Settings
from prbridge.models import PullRequestEvent
from prbridge.services.backlog_client import BacklogClient
from prbridge.services.github_client import GitHubClient
from prbridge.services.sync_service import SyncService
from prbridge.services.sync_targets import build_sync_target

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = {"pull_request", "pull_request_target"}
OPEN_ACTIONS = {"opened", "reopened", "ready_for_review", "edited"}


def _skipped(message: str) -> Dict[str, Any]:
    logger.info(message)
    return {"status": "skipped", "message": message}


class EventDispatcher:
    """Decides which workflow (if any) an event triggers and runs it"""

    def __init__(self, settings: Settings, backlog: BacklogClient, github: GitHubClient):
        self.settings = settings
        self.config = settings.sync_config()
        self.backlog = backlog
        self.github = github

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventDispatcher":
        """Build real API clients; raises ConfigurationError if settings are incomplete."""
        config = settings.sync_config()
        backlog = BacklogClient(
            config.backlog_host,
            settings.backlog_api_key,
            timeout=settings.http_timeout_seconds,
        )
        github = GitHubClient(settings.github_token, timeout=settings.http_timeout_seconds)
        return cls(settings, backlog, github)

    def close(self) -> None:
        """Release the Backlog connection pool."""
        self.backlog.close()

    def service_for(self, event: PullRequestEvent) -> SyncService:
        target = build_sync_target(
            self.settings.marker_target,
            self.github,
            event.repository,
            event.pull_request.number,
        )
        return SyncService(self.config, self.backlog, target, event.pull_request)

    def dispatch(self, event_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Handle one event. Per-issue failures end up in the returned report."""
        action = payload.get("action")
        logger.info(f"Event: {event_name}, Action: {action}")

        if event_name not in PULL_REQUEST_EVENTS:
            return _skipped(f"Skipping non-pull_request event: {event_name}")

        event = PullRequestEvent.from_payload(event_name, payload)
        if event is None:
            logger.warning("Could not extract pull request information")
            return {"status": "skipped", "message": "No pull request in payload"}

        pr = event.pull_request
        if event.action in OPEN_ACTIONS:
            if pr.is_draft:
                return _skipped("Skipping draft PR")
            if event.action == "edited" and event.sender_login == self.settings.bot_login:
                # Our own marker writes come back as "edited" events.
                return _skipped(f"Skipping edit made by {event.sender_login}")
            if not self.settings.add_comment:
                return _skipped("Comment on PR open is disabled")
            report = self.service_for(event).handle_pull_request_opened()
        elif event.action == "closed":
            if not pr.merged:
                return _skipped("PR was closed without merging, skipping")
            if not self.settings.update_status_on_merge:
                return _skipped("Status update on merge is disabled")
            report = self.service_for(event).handle_pull_request_merged()
        else:
            return _skipped(f"Skipping action: {event.action}")

        logger.info(f"Sync completed for PR #{pr.number}: {report.stats}")
        return report.to_dict()
