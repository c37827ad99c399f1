"""Issue key / action annotation parsing for PR titles and descriptions"""

import re
from typing import Dict, List, Optional

from prbridge.models.annotation import Action, Annotation

# Backlog issue key: PROJECT_KEY-NUMBER, e.g. "PROJ-123" or "MY_PROJECT-1".
# Project key is 1-25 chars, starts with a letter; issue number is 1-6 digits.
ISSUE_KEY_PATTERN = r"[A-Z][A-Z0-9_]{0,24}-[0-9]{1,6}"

FIX_KEYWORDS = ("fix", "fixes", "fixed", "resolve", "resolves", "resolved")
CLOSE_KEYWORDS = ("close", "closes", "closed")

_KEYWORD_ACTIONS: Dict[str, Action] = {
    **{kw: Action.FIX for kw in FIX_KEYWORDS},
    **{kw: Action.CLOSE for kw in CLOSE_KEYWORDS},
}

# Matching is ASCII-only. The lookbehind also treats the non-ASCII letters that
# case-fold onto ASCII ones (dotted I, dotless i, long s, Kelvin sign) as part
# of a preceding word.
_KEY_GLUE = "A-Z0-9_\u0130\u0131\u017f\u212a"
_ISSUE_KEY_RE = re.compile(
    rf"(?<![{_KEY_GLUE}]){ISSUE_KEY_PATTERN}(?![0-9])", re.IGNORECASE | re.ASCII
)
_ISSUE_KEY_FULL_RE = re.compile(ISSUE_KEY_PATTERN)

# Longest keywords first so "fixes" is never read as "fix" + "es...".
_ANNOTATION_RE = re.compile(
    r"\b(?P<keyword>{keywords})\b\s*[:：]?\s*#?(?P<key>{key})\b".format(
        keywords="|".join(sorted(_KEYWORD_ACTIONS, key=len, reverse=True)),
        key=ISSUE_KEY_PATTERN,
    ),
    re.IGNORECASE | re.ASCII,
)


def normalize_issue_key(value: str) -> str:
    """Uppercase and validate an issue key; raises ValueError if it is not one."""
    key = (value or "").strip().upper()
    if not _ISSUE_KEY_FULL_RE.fullmatch(key):
        raise ValueError(f"Invalid issue key: {value!r}")
    return key


def project_key_of(issue_key: str) -> str:
    """'PROJ-123' -> 'PROJ'"""
    return normalize_issue_key(issue_key).rsplit("-", 1)[0]


def action_for_keyword(keyword: str) -> Action:
    return _KEYWORD_ACTIONS[keyword.lower()]


def extract_issue_keys(text: Optional[str]) -> List[str]:
    """Return every issue key mentioned in `text`.

    Keys are uppercased and deduplicated, keeping first-occurrence order.
    A key glued to a longer letter/digit run (e.g. "XPROJ-1" inside a word,
    or "PROJ-1234567") is not matched at all.
    """
    if not text:
        return []

    keys: List[str] = []
    seen = set()
    for m in _ISSUE_KEY_RE.finditer(text):
        key = m.group(0).upper()
        if key in seen:
            continue
        seen.add(key)
        keys.append(key)
    return keys


def parse_annotations(text: Optional[str]) -> List[Annotation]:
    """Parse "fixes PROJ-1" / "close: #PROJ-2" style annotations from `text`.

    If the same issue key is annotated more than once, the first annotation
    wins and later ones are dropped, even when their action differs.
    """
    if not text:
        return []

    annotations: List[Annotation] = []
    seen = set()
    for m in _ANNOTATION_RE.finditer(text):
        key = m.group("key").upper()
        if key in seen:
            continue
        seen.add(key)
        annotations.append(
            Annotation(
                issue_key=key,
                action=action_for_keyword(m.group("keyword")),
                original_text=m.group(0).strip(),
            )
        )
    return annotations
