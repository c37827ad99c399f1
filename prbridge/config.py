"""Application configuration"""

from dataclasses import dataclass
from typing import Literal

from pydantic_settings import BaseSettings

from prbridge.errors import ConfigurationError
from prbridge.models.annotation import Action


@dataclass(frozen=True)
class SyncConfig:
    """Explicit configuration handed to the sync service"""

    backlog_host: str
    fix_status_id: int = 3
    close_status_id: int = 4

    def status_id_for(self, action: Action) -> int:
        return self.fix_status_id if action == Action.FIX else self.close_status_id


class Settings(BaseSettings):
    """Application settings"""

    # Backlog
    backlog_host: str | None = None
    backlog_api_key: str | None = None
    # Backlog's default workflow: 3 = Resolved, 4 = Closed.
    fix_status_id: int = 3
    close_status_id: int = 4

    # GitHub
    github_token: str | None = None
    # Edits made by this account are ignored (our own marker writes trigger "edited").
    bot_login: str = "github-actions[bot]"
    # Optional; when set, webhook deliveries must carry a valid X-Hub-Signature-256.
    webhook_secret: str | None = None

    # Workflows
    add_comment: bool = True
    update_status_on_merge: bool = True
    # Where tracking markers live: the PR "description" or its "comments".
    marker_target: Literal["description", "comments"] = "description"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    http_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def require(self, *names: str) -> None:
        """Raise ConfigurationError naming every missing setting."""
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(n.upper() for n in missing)
            )

    def sync_config(self) -> SyncConfig:
        self.require("backlog_host", "backlog_api_key", "github_token")
        return SyncConfig(
            backlog_host=self.backlog_host,
            fix_status_id=self.fix_status_id,
            close_status_id=self.close_status_id,
        )


settings = Settings()
