"""Proposal service - read side of the proposal workflow."""

from typing import Optional

from src.application.dto import ProposalPage, ProposalResponse
from src.domain.entities import Proposal, ProposalStatus
from src.domain.exceptions import ProposalNotFoundException, ValidationException
from src.domain.interfaces import ProposalRepository

MAX_PAGE_SIZE = 100


def check_paging(page: int, size: int) -> None:
    if page < 1:
        raise ValidationException("page must be at least 1", field="page")
    if size < 1 or size > MAX_PAGE_SIZE:
        raise ValidationException(
            f"size must be between 1 and {MAX_PAGE_SIZE}", field="size"
        )


class ProposalService:
    """Application service for proposal queries."""

    def __init__(self, proposal_repository: ProposalRepository):
        self._proposal_repo = proposal_repository

    async def get_proposal(self, proposal_id: int) -> Proposal:
        """
        Get a proposal with its steps.

        Raises:
            ProposalNotFoundException: If the proposal does not exist
        """
        proposal = await self._proposal_repo.get_by_id(proposal_id)
        if proposal is None:
            raise ProposalNotFoundException(proposal_id)
        return proposal

    async def list_proposals(
        self,
        status: Optional[ProposalStatus] = None,
        page: int = 1,
        size: int = 20,
    ) -> ProposalPage:
        """List proposals ordered by id, optionally filtered by status."""
        check_paging(page, size)

        proposals = await self._proposal_repo.list(
            status=status,
            limit=size,
            offset=(page - 1) * size,
        )
        total = await self._proposal_repo.count(status=status)

        return ProposalPage(
            items=[ProposalResponse.from_entity(p) for p in proposals],
            page=page,
            size=size,
            total=total,
        )
