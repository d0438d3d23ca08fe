"""
Correlate package: read ticket references and template checkboxes out of PR descriptions.
"""

from .linker import find_ticket_references
from .template import determine_pr_type, extract_pr_metadata

__all__ = ["find_ticket_references", "determine_pr_type", "extract_pr_metadata"]
