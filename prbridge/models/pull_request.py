"""Pull request models built from GitHub payloads / API responses"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PullRequestText:
    title: str
    body: str


@dataclass(frozen=True)
class PullRequestComment:
    id: int
    body: str


@dataclass(frozen=True)
class PullRequestInfo:
    """The parts of a pull request the sync workflows care about"""

    number: int
    title: str
    body: str
    url: str
    is_draft: bool = False
    merged: bool = False

    @property
    def text(self) -> str:
        """Title and body, as scanned for issue keys / annotations."""
        return f"{self.title}\n{self.body}"

    @classmethod
    def from_payload(cls, pr: Dict[str, Any]) -> "PullRequestInfo":
        return cls(
            number=int(pr["number"]),
            title=pr.get("title") or "",
            body=pr.get("body") or "",
            url=pr.get("html_url") or "",
            is_draft=bool(pr.get("draft") or False),
            merged=bool(pr.get("merged") or False),
        )


@dataclass(frozen=True)
class PullRequestEvent:
    """A pull_request webhook / Actions event"""

    event_name: str
    action: str
    repository: str
    pull_request: PullRequestInfo
    sender_login: Optional[str] = None

    @classmethod
    def from_payload(cls, event_name: str, payload: Dict[str, Any]) -> Optional["PullRequestEvent"]:
        """Return None when the payload carries no pull request."""
        pr = payload.get("pull_request")
        if not pr:
            return None
        repo = payload.get("repository") or {}
        sender = payload.get("sender") or {}
        return cls(
            event_name=event_name,
            action=str(payload.get("action") or ""),
            repository=str(repo.get("full_name") or ""),
            pull_request=PullRequestInfo.from_payload(pr),
            sender_login=sender.get("login"),
        )
