"""Hidden tracking markers embedded in PR descriptions / comments.

A marker records that a side effect for one (operation, issue key) pair has
already happened. Markers are HTML comments, so they render as nothing in
GitHub Markdown, and they are never removed once written.
"""

import enum
import re
from dataclasses import dataclass
from typing import List, Optional

from prbridge.services.annotations import ISSUE_KEY_PATTERN, normalize_issue_key


class OperationKind(str, enum.Enum):
    """Side effects guarded by markers"""

    LINK_POSTED = "link"
    MERGE_PROCESSED = "merged"


class IssueState(str, enum.Enum):
    """Per-issue progress for a single PR (monotonic)"""

    UNTOUCHED = "untouched"
    LINK_POSTED = "link_posted"
    MERGE_PROCESSED = "merge_processed"


_MARKER_RE = re.compile(
    r"<!-- backlog-(?P<op>link|merged):(?P<key>{key}) -->".format(key=ISSUE_KEY_PATTERN)
)


@dataclass(frozen=True)
class TrackingMarker:
    operation: OperationKind
    issue_key: str

    @property
    def token(self) -> str:
        return f"<!-- backlog-{self.operation.value}:{self.issue_key} -->"

    def __str__(self) -> str:
        return self.token


def build_marker(operation: OperationKind, issue_key: str) -> TrackingMarker:
    """Deterministic marker for (operation, issue_key)."""
    return TrackingMarker(operation=OperationKind(operation), issue_key=normalize_issue_key(issue_key))


def contains_marker(text: Optional[str], operation: OperationKind, issue_key: str) -> bool:
    """Exact substring check for the canonical marker token."""
    if not text:
        return False
    return build_marker(operation, issue_key).token in text


def find_markers(text: Optional[str]) -> List[TrackingMarker]:
    """All well-formed markers in `text`, in scan order, without duplicates."""
    if not text:
        return []
    found: List[TrackingMarker] = []
    for m in _MARKER_RE.finditer(text):
        marker = TrackingMarker(operation=OperationKind(m.group("op")), issue_key=m.group("key"))
        if marker not in found:
            found.append(marker)
    return found


def issue_state(text: Optional[str], issue_key: str) -> IssueState:
    """Where `issue_key` stands in the Untouched -> LinkPosted -> MergeProcessed machine."""
    if contains_marker(text, OperationKind.MERGE_PROCESSED, issue_key):
        return IssueState.MERGE_PROCESSED
    if contains_marker(text, OperationKind.LINK_POSTED, issue_key):
        return IssueState.LINK_POSTED
    return IssueState.UNTOUCHED
