"""
Pull request template parsing.
Reads checked markdown boxes ("- [x] ...") out of a PR description to classify the PR
and fill the metadata columns of the Merge Request sheet.
"""
import re
from typing import List, Optional, Tuple

from normalize.models import PRMetadata, PRType
from .linker import find_ticket_references

# a checked list item: "- [x]" / "* [X]" at the start of a line
_CHECKED = r"^[ \t]*[-*+][ \t]+\[[xX]\]"


def _checked_box(label: str):
    """Checked box whose line contains `label` anywhere after the box."""
    return re.compile(_CHECKED + r"[^\n]*?(?:" + label + r")", re.MULTILINE | re.IGNORECASE)


def _type_box(label: str):
    """Checked box followed by an optional emoji and a bold label, e.g. "- [x] 🚀 **Feature**"."""
    return re.compile(_CHECKED + r"[ \t]*[^\w\n*]*[ \t]*\*\*(?:" + label + r")\*\*", re.MULTILINE | re.IGNORECASE)


# Order matters: a malformed body may tick several boxes and the first rule wins.
TYPE_CHECKBOXES: List[Tuple[PRType, "re.Pattern"]] = [
    (PRType.FEATURE, _type_box(r"Feature")),
    (PRType.BUGFIX, _type_box(r"Bug ?fix")),
    (PRType.HOTFIX, _type_box(r"Hot ?fix")),
    (PRType.CHORE, _type_box(r"Chore")),
    (PRType.DOCUMENTATION, _type_box(r"Documentation")),
    (PRType.REFACTOR, _type_box(r"Refactor")),
    (PRType.STYLE, _type_box(r"Style")),
    (PRType.TEST, _type_box(r"Tests?")),
]

BRANCH_PREFIXES: List[Tuple[Tuple[str, ...], PRType]] = [
    (("feature/",), PRType.FEATURE),
    (("hotfix/",), PRType.HOTFIX),
    (("bugfix/", "fix/"), PRType.BUGFIX),
    (("chore/",), PRType.CHORE),
    (("docs/",), PRType.DOCUMENTATION),
    (("refactor/",), PRType.REFACTOR),
    (("style/",), PRType.STYLE),
    (("test/",), PRType.TEST),
]

# "No breaking changes" / "Non-breaking change" are ticked denials, not breaking changes
BREAKING_CHANGE = _checked_box(r"(?<!no )(?<!non-)\bbreaking change")

SECURITY_CHECKBOXES = [
    ("Improvement", _checked_box(r"security improvement")),
    ("Review Required", _checked_box(r"security review required")),
]

TESTING_CHECKBOXES = [
    ("Local", _checked_box(r"tested locally")),
    ("Added/Updated", _checked_box(r"\btests?\b[^\n]*\b(?:added|updated)\b|\b(?:added|updated)\b[^\n]*\btests?\b")),
    ("Manual", _checked_box(r"manual(?:ly)? test")),
]

DOCUMENTATION_CHECKBOXES = [
    ("Updated", _checked_box(r"documentation updated")),
    ("Planned", _checked_box(r"documentation (?:update )?planned")),
]


def type_from_template(body: str) -> Optional[PRType]:
    if not body:
        return None
    for pr_type, pattern in TYPE_CHECKBOXES:
        if pattern.search(body):
            return pr_type
    return None


def type_from_branch(branch_name: str) -> PRType:
    branch_name = branch_name or ""
    for prefixes, pr_type in BRANCH_PREFIXES:
        if branch_name.startswith(prefixes):
            return pr_type
    return PRType.OTHER


def determine_pr_type(branch_name: str, body: str = "") -> PRType:
    """Template checkbox first, branch prefix second, Other last."""
    return type_from_template(body) or type_from_branch(branch_name)


def _first_match(body: str, candidates, default: str) -> str:
    for label, pattern in candidates:
        if pattern.search(body):
            return label
    return default


def _testing_status(body: str) -> str:
    labels = [label for label, pattern in TESTING_CHECKBOXES if pattern.search(body)]
    return ", ".join(labels) if labels else "Not specified"


def extract_pr_metadata(body: str) -> PRMetadata:
    """Independent scans of the description; anything unticked keeps its default."""
    body = body or ""
    return PRMetadata(
        tickets=tuple(find_ticket_references(body)),
        breaking_changes=bool(BREAKING_CHANGE.search(body)),
        security=_first_match(body, SECURITY_CHECKBOXES, "None"),
        testing=_testing_status(body),
        documentation=_first_match(body, DOCUMENTATION_CHECKBOXES, "Not needed"),
    )
