"""Per-item outcomes of a sync workflow run"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class ItemStatus(str, enum.Enum):
    """Outcome of one issue key / annotation"""
    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


class ErrorKind(str, enum.Enum):
    """Why an item was skipped or failed"""
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    UNEXPECTED = "unexpected"


@dataclass
class ItemResult:
    issue_key: str
    status: ItemStatus
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_key": self.issue_key,
            "status": self.status.value,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }


@dataclass
class SyncReport:
    """Result of one workflow run over all keys found in a PR"""

    workflow: str
    pr_number: int
    items: List[ItemResult] = field(default_factory=list)

    @property
    def stats(self) -> Dict[str, int]:
        stats = {s.value: 0 for s in ItemStatus}
        for item in self.items:
            stats[item.status.value] += 1
        return stats

    @property
    def status(self) -> str:
        if any(item.status == ItemStatus.FAILED for item in self.items):
            return "partial_failure"
        return "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "workflow": self.workflow,
            "pr_number": self.pr_number,
            "stats": self.stats,
            "items": [item.to_dict() for item in self.items],
        }
