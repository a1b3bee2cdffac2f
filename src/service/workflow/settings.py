"""
Workflow Settings for the proposal approval engine.

Environment variables use the WORKFLOW_ prefix:
    WORKFLOW_DEFAULT_APPROVAL_CHAIN=PEER_REVIEW,MANAGER_APPROVAL,COMPLIANCE
    WORKFLOW_MAX_DESCRIPTION_LENGTH=2000

Usage:
    from src.service.workflow.settings import workflow_settings

    chain = workflow_settings.default_chain

    # Or pass explicit settings to the engine in tests
    custom = WorkflowSettings(default_approval_chain="LEGAL")
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowSettings(BaseSettings):
    """
    Configurable parameters for the approval workflow.

    Passed explicitly to ApprovalWorkflowService at construction.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_approval_chain: str = Field(
        default="PEER_REVIEW,MANAGER_APPROVAL,COMPLIANCE",
        description="Comma-separated role names used when submit receives no chain",
    )
    max_description_length: int = Field(
        default=2000,
        ge=1,
        description="Maximum proposal description length",
    )
    max_title_length: int = Field(
        default=255,
        ge=1,
        description="Maximum title and applicant name length",
    )
    max_chain_length: int = Field(
        default=20,
        ge=1,
        description="Maximum number of steps in an approval chain",
    )
    max_role_length: int = Field(
        default=100,
        ge=1,
        description="Maximum length of a role name in an approval chain",
    )
    max_approver_length: int = Field(
        default=255,
        ge=1,
        description="Maximum approver name length",
    )

    @field_validator("default_approval_chain")
    @classmethod
    def validate_default_chain(cls, v: str) -> str:
        """Ensure the default chain names at least one non-blank role."""
        roles = [role.strip() for role in v.split(",")]
        if not roles or any(not role for role in roles):
            raise ValueError("default_approval_chain must list non-blank roles")
        return v

    @model_validator(mode="after")
    def validate_default_role_length(self) -> "WorkflowSettings":
        """Default roles obey the same length bound as submitted roles."""
        if any(len(role) > self.max_role_length for role in self.default_chain):
            raise ValueError(
                f"default_approval_chain roles must be at most {self.max_role_length} characters"
            )
        return self

    @property
    def default_chain(self) -> List[str]:
        """Default approval chain as an ordered list of trimmed roles."""
        return [role.strip() for role in self.default_approval_chain.split(",")]


@lru_cache
def get_workflow_settings() -> WorkflowSettings:
    """Get cached workflow settings instance."""
    return WorkflowSettings()


workflow_settings = get_workflow_settings()
