"""
Approval Workflow Module - settings and input rules for the state machine.
"""

from .settings import WorkflowSettings, workflow_settings
from .validation import (
    normalize_amount,
    normalize_chain,
    optional_text,
    require_text,
    resolve_chain,
)

__all__ = [
    "WorkflowSettings",
    "workflow_settings",
    "normalize_amount",
    "normalize_chain",
    "optional_text",
    "require_text",
    "resolve_chain",
]
