"""String helpers for free-text reference handling."""

import re
from typing import List, Optional

_PARENTHETICAL_RE = re.compile(r"\s*\([^)]*\)\s*")
_PARENTHETICAL_CONTENT_RE = re.compile(r"\(([^)]+)\)")
_LEADING_CLUSTER_RE = re.compile(r"^([A-C])\b")
_AND_CLUSTER_RE = re.compile(r"\band\s+([A-C])\b")


def strip_parentheticals(text: str) -> str:
    """Remove every "(...)" annotation.

    "Time Blindness (primary)" -> "Time Blindness"
    """
    return _PARENTHETICAL_RE.sub("", text).strip()


def extract_parenthetical(text: str) -> Optional[str]:
    """Return the content of the first "(...)" group, or None.

    "Task Initiation Failure (FP01)" -> "FP01"
    """
    match = _PARENTHETICAL_CONTENT_RE.search(text)
    return match.group(1).strip() if match else None


def substring_match(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def extract_cluster_letters(cluster_field: str) -> List[str]:
    """Extract cluster letters from a free-text cluster field.

    "A — Time-Perception Cascade" -> ["A"]
    "A and C (convergence point)" -> ["A", "C"]
    "Standalone" / "Cross-cluster amplifier" -> []
    """
    if not cluster_field or cluster_field == "Standalone" or cluster_field.startswith("Cross-cluster"):
        return []

    letters: List[str] = []
    leading = _LEADING_CLUSTER_RE.match(cluster_field)
    if leading:
        letters.append(leading.group(1))
    letters.extend(_AND_CLUSTER_RE.findall(cluster_field))
    return letters


def cluster_letter_to_id(letter: str) -> str:
    return f"CL_{letter.upper()}"
