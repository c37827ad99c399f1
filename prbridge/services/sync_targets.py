"""Where tracking markers are stored: the PR description or the PR comments.

A deployment picks one target and sticks with it; markers written to one
target are invisible to the other.

Both targets re-read their content right before writing a marker and skip
the write if the marker showed up in the meantime. That narrows, but does
not close, the window in which two overlapping runs for the same PR can
both perform the guarded side effect.
"""

import logging
import re
from abc import ABC, abstractmethod

from prbridge.errors import ConfigurationError
from prbridge.services.backlog_client import strip_scheme
from prbridge.services.github_client import GitHubClient
from prbridge.services.markers import OperationKind, build_marker, contains_marker

logger = logging.getLogger(__name__)

LINK_LINE_PREFIX = "🔗 Backlog:"
_LINK_LINE_RE = re.compile(r"^(🔗 Backlog: .*)$", re.MULTILINE)


def issue_url(host: str, issue_key: str) -> str:
    """Browser URL of a Backlog issue"""
    return f"https://{strip_scheme(host)}/view/{issue_key}"


class SyncTarget(ABC):
    """Text surface of a single pull request that carries tracking markers"""

    kind = ""

    def __init__(self, github: GitHubClient, repository: str, pr_number: int):
        self.github = github
        self.repository = repository
        self.pr_number = pr_number

    @abstractmethod
    def content(self) -> str:
        """Current text that may contain markers (always fetched fresh)."""

    def contains(self, operation: OperationKind, issue_key: str) -> bool:
        return contains_marker(self.content(), operation, issue_key)

    @abstractmethod
    def record_link(self, issue_key: str, url: str) -> bool:
        """Persist the LINK_POSTED marker. False if it was already there."""

    @abstractmethod
    def record_merge(self, issue_key: str, status_label: str) -> bool:
        """Persist the MERGE_PROCESSED marker. False if it was already there."""


class DescriptionSyncTarget(SyncTarget):
    """Markers (plus a visible link line) appended to the PR description"""

    kind = "description"

    def content(self) -> str:
        return self.github.get_pr_text(self.repository, self.pr_number).body

    def _append(self, issue_key: str, operation: OperationKind, render) -> bool:
        body = self.content()
        marker = build_marker(operation, issue_key).token
        if marker in body:
            logger.info(f"PR #{self.pr_number} already has {marker}, skipping")
            return False
        self.github.update_pr_body(self.repository, self.pr_number, render(body, marker))
        logger.info(
            f"Added {operation.value} marker for {issue_key} to PR #{self.pr_number} description"
        )
        return True

    @staticmethod
    def _with_link(body: str, issue_key: str, url: str, marker: str) -> str:
        link = f"[{issue_key}]({url})"
        if _LINK_LINE_RE.search(body):
            # Extend the existing link line rather than adding a second section.
            body = _LINK_LINE_RE.sub(lambda m: f"{m.group(1)} {link}", body, count=1)
            return f"{body}\n{marker}"
        return f"{body}\n\n---\n{LINK_LINE_PREFIX} {link}\n{marker}"

    def record_link(self, issue_key: str, url: str) -> bool:
        return self._append(
            issue_key,
            OperationKind.LINK_POSTED,
            lambda body, marker: self._with_link(body, issue_key, url, marker),
        )

    def record_merge(self, issue_key: str, status_label: str) -> bool:
        return self._append(
            issue_key,
            OperationKind.MERGE_PROCESSED,
            lambda body, marker: f"{body}\n{marker}",
        )


class CommentSyncTarget(SyncTarget):
    """One PR comment per recorded side effect, each carrying its marker"""

    kind = "comments"

    def content(self) -> str:
        comments = self.github.get_pr_comments(self.repository, self.pr_number)
        return "\n".join(c.body for c in comments)

    def _post(self, issue_key: str, operation: OperationKind, text: str) -> bool:
        marker = build_marker(operation, issue_key).token
        if marker in self.content():
            logger.info(f"PR #{self.pr_number} already has a comment with {marker}, skipping")
            return False
        self.github.add_pr_comment(self.repository, self.pr_number, f"{text}\n\n{marker}")
        return True

    def record_link(self, issue_key: str, url: str) -> bool:
        return self._post(
            issue_key, OperationKind.LINK_POSTED, f"{LINK_LINE_PREFIX} [{issue_key}]({url})"
        )

    def record_merge(self, issue_key: str, status_label: str) -> bool:
        return self._post(
            issue_key, OperationKind.MERGE_PROCESSED, f"✅ Backlog: {issue_key} → {status_label}"
        )


SYNC_TARGETS = {cls.kind: cls for cls in (DescriptionSyncTarget, CommentSyncTarget)}


def build_sync_target(kind: str, github: GitHubClient, repository: str, pr_number: int) -> SyncTarget:
    """Instantiate the configured marker target for one pull request"""
    try:
        target_cls = SYNC_TARGETS[kind]
    except KeyError:
        raise ConfigurationError(
            f"Unknown marker target {kind!r} (expected one of: {', '.join(SYNC_TARGETS)})"
        )
    return target_cls(github, repository, pr_number)
