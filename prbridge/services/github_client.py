"""GitHub API client wrapper (pull request text and comments)"""
import logging
from typing import Any, List

import requests
from github import Auth, Github, GithubException

from prbridge.errors import NotFoundError, TransportError
from prbridge.models import PullRequestComment, PullRequestText

logger = logging.getLogger(__name__)


class GitHubClient:
    """Wrapper for the GitHub operations the sync workflows need"""

    def __init__(self, token: str, *, timeout: float = 30.0):
        """Initialize GitHub client"""
        self.gh = Github(auth=Auth.Token(token), timeout=int(timeout))

    @staticmethod
    def _translate(exc: Exception, what: str) -> Exception:
        """Map PyGithub / requests failures onto our error taxonomy."""
        if isinstance(exc, GithubException):
            if exc.status == 404:
                return NotFoundError(f"{what}: not found")
            return TransportError(f"{what} failed with HTTP {exc.status}", exc.status)
        return TransportError(f"{what} failed: {exc}")

    def _call(self, what: str, fn) -> Any:
        try:
            return fn()
        except (GithubException, requests.RequestException) as e:
            logger.error(f"{what} failed: {e}")
            raise self._translate(e, what) from e

    def get_pull(self, repository: str, pr_number: int) -> Any:
        """Get a pull request object"""
        return self._call(
            f"Get PR {repository}#{pr_number}",
            lambda: self.gh.get_repo(repository).get_pull(int(pr_number)),
        )

    def get_pr_text(self, repository: str, pr_number: int) -> PullRequestText:
        """Current title and body (description) of a pull request"""
        pr = self.get_pull(repository, pr_number)
        return PullRequestText(title=pr.title or "", body=pr.body or "")

    def get_pr_comments(self, repository: str, pr_number: int) -> List[PullRequestComment]:
        """All conversation comments on a pull request, oldest first"""
        pr = self.get_pull(repository, pr_number)
        comments = self._call(
            f"List comments on {repository}#{pr_number}",
            lambda: list(pr.get_issue_comments()),
        )
        return [PullRequestComment(id=c.id, body=c.body or "") for c in comments]

    def add_pr_comment(self, repository: str, pr_number: int, body: str) -> None:
        """Create a conversation comment on a pull request"""
        pr = self.get_pull(repository, pr_number)
        self._call(
            f"Comment on {repository}#{pr_number}",
            lambda: pr.create_issue_comment(body),
        )
        logger.info(f"Created comment on PR {repository}#{pr_number}")

    def update_pr_body(self, repository: str, pr_number: int, body: str) -> None:
        """Replace the description of a pull request"""
        pr = self.get_pull(repository, pr_number)
        self._call(f"Update body of {repository}#{pr_number}", lambda: pr.edit(body=body))
        logger.info(f"Updated description of PR {repository}#{pr_number}")
