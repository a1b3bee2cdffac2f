"""Proposal workflow domain exceptions."""

from .base import DomainException


class ValidationException(DomainException):
    """Raised when input is malformed. Never reaches the state machine."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
        )
        self.field = field


class ProposalNotFoundException(DomainException):
    """Raised when a proposal cannot be found."""

    def __init__(self, proposal_id: int):
        super().__init__(
            message=f"Proposal not found: {proposal_id}",
            code="PROPOSAL_NOT_FOUND",
        )
        self.proposal_id = proposal_id


class InvalidProposalStateException(DomainException):
    """Raised when an operation is illegal for the proposal's current status or step."""

    def __init__(self, message: str, proposal_id: int | None = None):
        super().__init__(
            message=message,
            code="INVALID_PROPOSAL_STATE",
        )
        self.proposal_id = proposal_id


class ConcurrentModificationException(InvalidProposalStateException):
    """Raised when another writer changed the proposal between read and write."""

    def __init__(self, proposal_id: int):
        super().__init__(
            message=f"Proposal {proposal_id} was modified concurrently; reload and retry",
            proposal_id=proposal_id,
        )
        self.code = "CONCURRENT_MODIFICATION"
