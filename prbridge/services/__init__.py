"""Services"""

from prbridge.services.backlog_client import BacklogClient
from prbridge.services.github_client import GitHubClient
from prbridge.services.sync_service import SyncService

__all__ = ["BacklogClient", "GitHubClient", "SyncService"]
