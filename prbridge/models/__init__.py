"""Plain data models (nothing here is persisted)"""

from prbridge.models.annotation import Action, Annotation
from prbridge.models.pull_request import (
    PullRequestComment,
    PullRequestEvent,
    PullRequestInfo,
    PullRequestText,
)
from prbridge.models.sync_result import ErrorKind, ItemResult, ItemStatus, SyncReport

__all__ = [
    "Action",
    "Annotation",
    "PullRequestComment",
    "PullRequestEvent",
    "PullRequestInfo",
    "PullRequestText",
    "ErrorKind",
    "ItemResult",
    "ItemStatus",
    "SyncReport",
]
