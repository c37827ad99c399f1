"""Annotation models (derived per run from PR text, never stored)"""

import enum
from dataclasses import dataclass


class Action(str, enum.Enum):
    """What a merged PR does to an annotated issue"""

    FIX = "fix"
    CLOSE = "close"


@dataclass(frozen=True)
class Annotation:
    """A (issue key, action) pair detected in PR text"""

    issue_key: str
    action: Action
    original_text: str
