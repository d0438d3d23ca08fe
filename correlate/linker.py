"""
Ticket reference heuristics for pull request descriptions.
A ticket reference is a bracketed issue key immediately followed by a markdown link,
e.g. "[ENG-123](https://linear.app/acme/issue/ENG-123)".
"""
import re
from typing import List, Optional

DEFAULT_KEY_PATTERN = r"[A-Z][A-Z0-9]+-\d+"


def ticket_reference_pattern(key_pattern: Optional[str] = None):
    key_pattern = key_pattern or DEFAULT_KEY_PATTERN
    return re.compile(r"\[(" + key_pattern + r")\]\((https?://[^)\s]+)\)")


def find_ticket_references(text: str, key_pattern: Optional[str] = None) -> List[str]:
    """Keys of every linked ticket reference in order of appearance.

    Repeated references are kept so the Linear Tickets column mirrors the description.
    Bare keys without a link (e.g. "ENG-1 was flaky") are not references.
    """
    if not text:
        return []
    return [m.group(1) for m in ticket_reference_pattern(key_pattern).finditer(text)]
