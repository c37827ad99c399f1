"""Pull request -> Backlog synchronization service"""

import logging
from typing import Callable

from prbridge.config import SyncConfig
from prbridge.errors import NotFoundError, PRBridgeError, TransportError
from prbridge.models import ErrorKind, ItemResult, ItemStatus, PullRequestInfo, SyncReport
from prbridge.services.annotations import (
    Annotation,
    extract_issue_keys,
    parse_annotations,
    project_key_of,
)
from prbridge.services.backlog_client import BacklogClient
from prbridge.services.markers import OperationKind
from prbridge.services.sync_targets import SyncTarget, issue_url

logger = logging.getLogger(__name__)


class SyncService:
    """Runs the "PR opened" and "PR merged" workflows for one pull request.

    Every side effect is guarded by a marker check on the sync target and
    followed by a marker write, so re-delivered events are no-ops. Items are
    handled one at a time, in order; a failure on one issue key never stops
    the others.
    """

    def __init__(
        self,
        config: SyncConfig,
        backlog: BacklogClient,
        target: SyncTarget,
        pull_request: PullRequestInfo,
    ):
        self.config = config
        self.backlog = backlog
        self.target = target
        self.pr = pull_request

    @staticmethod
    def _error_kind(exc: Exception) -> ErrorKind:
        if isinstance(exc, TransportError):
            return ErrorKind.TRANSPORT
        return ErrorKind.UNEXPECTED

    def _run_item(self, issue_key: str, what: str, fn: Callable[[], ItemResult]) -> ItemResult:
        """Run one item. A missing issue is SKIPPED, any other failure is FAILED."""
        try:
            return fn()
        except NotFoundError as e:
            logger.warning(f"Issue {issue_key} not found while trying to {what}, skipping: {e}")
            return ItemResult(issue_key, ItemStatus.SKIPPED, ErrorKind.NOT_FOUND, str(e))
        except PRBridgeError as e:
            kind = self._error_kind(e)
            logger.error(f"Failed to {what} for {issue_key} ({kind.value}): {e}")
            return ItemResult(issue_key, ItemStatus.FAILED, kind, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while trying to {what} for {issue_key}")
            return ItemResult(issue_key, ItemStatus.FAILED, ErrorKind.UNEXPECTED, str(e))

    # ---- Workflow A: PR opened / reopened / ready for review / edited -------

    def _open_comment(self) -> str:
        return f"GitHub pull request opened:\n{self.pr.url}\n\n**{self.pr.title}**"

    def _link_issue(self, issue_key: str) -> ItemResult:
        if self.target.contains(OperationKind.LINK_POSTED, issue_key):
            logger.info(f"Link for {issue_key} already recorded on PR #{self.pr.number}, skipping")
            return ItemResult(issue_key, ItemStatus.SKIPPED, message="already linked")

        if not self.backlog.issue_exists(issue_key):
            logger.warning(f"Issue {issue_key} not found in Backlog, skipping")
            return ItemResult(
                issue_key, ItemStatus.SKIPPED, ErrorKind.NOT_FOUND, "issue not found in Backlog"
            )

        self.backlog.add_comment(issue_key, self._open_comment())
        logger.info(f"Added comment to {issue_key}")

        self.target.record_link(issue_key, issue_url(self.config.backlog_host, issue_key))
        return ItemResult(issue_key, ItemStatus.PROCESSED, message="linked")

    def handle_pull_request_opened(self) -> SyncReport:
        """Comment on every Backlog issue mentioned in the PR title or body."""
        logger.info(f"Processing PR #{self.pr.number}: {self.pr.title}")
        report = SyncReport(workflow="opened", pr_number=self.pr.number)

        issue_keys = extract_issue_keys(self.pr.text)
        if not issue_keys:
            logger.info("No Backlog issue keys found in PR title or description")
            return report

        logger.info(f"Found Backlog issue keys: {', '.join(issue_keys)}")
        for issue_key in issue_keys:
            report.items.append(
                self._run_item(issue_key, "add comment", lambda key=issue_key: self._link_issue(key))
            )
        return report

    # ---- Workflow B: PR merged ----------------------------------------------

    def _status_label(self, issue_key: str, status_id: int) -> str:
        """Human-readable name of `status_id` (best effort)."""
        try:
            statuses = self.backlog.get_project_statuses(project_key_of(issue_key))
        except PRBridgeError as e:
            logger.warning(f"Could not read statuses for {issue_key}: {e}")
            return f"#{status_id}"
        for status in statuses or []:
            if status.get("id") == status_id and status.get("name"):
                return str(status["name"])
        return f"#{status_id}"

    def _merge_comment(self, label: str) -> str:
        return f'GitHub pull request merged:\n{self.pr.url}\n\nStatus updated to "{label}".'

    def _apply_annotation(self, annotation: Annotation) -> ItemResult:
        issue_key, action = annotation.issue_key, annotation.action

        if self.target.contains(OperationKind.MERGE_PROCESSED, issue_key):
            logger.info(f"Merge for {issue_key} already processed on PR #{self.pr.number}, skipping")
            return ItemResult(issue_key, ItemStatus.SKIPPED, message="already processed")

        issue = self.backlog.get_issue(issue_key)
        logger.info(f"Found issue {issue_key}: {issue.get('summary', '')}")

        status_id = self.config.status_id_for(action)
        self.backlog.update_status(issue_key, status_id)
        label = self._status_label(issue_key, status_id)
        logger.info(f"Updated {issue_key} status to {label} (ID: {status_id})")

        self.backlog.add_comment(issue_key, self._merge_comment(label))
        logger.info(f"Added merge comment to {issue_key}")

        self.target.record_merge(issue_key, label)
        return ItemResult(issue_key, ItemStatus.PROCESSED, message=f"{action.value} -> {label}")

    def process_annotation(self, annotation: Annotation) -> ItemResult:
        """Apply one annotation; failures are reported, never raised."""
        return self._run_item(
            annotation.issue_key,
            "process annotation",
            lambda: self._apply_annotation(annotation),
        )

    def handle_pull_request_merged(self) -> SyncReport:
        """Move every annotated Backlog issue to its configured status."""
        logger.info(f"Processing merged PR #{self.pr.number}: {self.pr.title}")
        report = SyncReport(workflow="merged", pr_number=self.pr.number)

        annotations = parse_annotations(self.pr.text)
        if not annotations:
            logger.info("No action annotations found in PR title or description")
            return report

        logger.info(
            "Found annotations: " + ", ".join(f"{a.action.value} {a.issue_key}" for a in annotations)
        )
        for annotation in annotations:
            report.items.append(self.process_annotation(annotation))
        return report
