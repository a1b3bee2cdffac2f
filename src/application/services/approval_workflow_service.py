"""Approval workflow service - the proposal state machine use cases."""

from typing import List, Optional

import structlog

from src.application.dto import CreateProposalRequest, StepDecisionRequest
from src.core.metrics import record_transition
from src.domain.entities import Proposal, ProposalEvent, ProposalStatus
from src.domain.exceptions import ProposalNotFoundException, ValidationException
from src.domain.interfaces import ProposalRepository
from src.service.workflow import (
    WorkflowSettings,
    normalize_amount,
    normalize_chain,
    optional_text,
    require_text,
    resolve_chain,
    workflow_settings,
)

from .event_emitter import EventEmitter

logger = structlog.get_logger(__name__)


class ApprovalWorkflowService:
    """
    Application service for proposal transitions.

    Every transition follows the same sequence:

        validate input -> lock proposal -> mutate aggregate
            -> write back -> stage event -> commit -> emit event

    Validation and state errors are raised before anything is written.
    The event is emitted only after the commit, so a consumer never sees
    an event for a transition that was rolled back.
    """

    def __init__(
        self,
        proposal_repository: ProposalRepository,
        emitter: EventEmitter,
        settings: WorkflowSettings | None = None,
    ):
        self._proposal_repo = proposal_repository
        self._emitter = emitter
        self._settings = settings or workflow_settings

    async def create_proposal(self, request: CreateProposalRequest) -> Proposal:
        """
        Create a DRAFT proposal. No event is emitted.

        Raises:
            ValidationException: If any field is missing or malformed
        """
        s = self._settings
        proposal = Proposal(
            title=require_text(request.title, "title", s.max_title_length),
            applicant_name=require_text(
                request.applicant_name, "applicant_name", s.max_title_length
            ),
            amount=normalize_amount(request.amount),
            description=optional_text(
                request.description, "description", s.max_description_length
            ),
            approval_chain=normalize_chain(
                request.approval_chain, s.max_chain_length, s.max_role_length
            ),
        )

        await self._proposal_repo.add(proposal)
        await self._proposal_repo.commit()

        logger.info(
            "proposal_created",
            proposal_id=proposal.id,
            amount=str(proposal.amount),
            has_chain=proposal.approval_chain is not None,
        )
        return proposal

    async def submit(
        self,
        proposal_id: int,
        chain_override: Optional[List[str]] = None,
    ) -> Proposal:
        """
        Move a DRAFT proposal to UNDER_REVIEW and emit PROPOSAL_SUBMITTED.

        The chain is the override if non-empty, else the chain stored at
        creation, else the configured default.

        Raises:
            ProposalNotFoundException: If the proposal does not exist. An
                unknown id is a missing resource here, so it maps to 404
                like every other lookup rather than to a 400.
            ValidationException: If the override has a blank or overlong role
            InvalidProposalStateException: If the proposal is not DRAFT
            PublishException: If the event could not be published
        """
        s = self._settings
        proposal = await self._load_for_update(proposal_id)
        chain = resolve_chain(
            chain_override,
            proposal.approval_chain,
            s.default_chain,
            s.max_chain_length,
            s.max_role_length,
        )

        proposal.submit(chain)
        event = ProposalEvent.submitted(proposal.id, chain)

        return await self._complete(proposal, event)

    async def approve(self, proposal_id: int, request: StepDecisionRequest) -> Proposal:
        """
        Approve the current step.

        Emits STEP_APPROVED when later steps remain, PROPOSAL_APPROVED
        when the last step was approved.

        Raises:
            ValidationException: If the approver is blank or overlong
            ProposalNotFoundException: If the proposal does not exist
            InvalidProposalStateException: If the proposal is not UNDER_REVIEW
                or its current step cannot be decided
            PublishException: If the event could not be published
        """
        approver, comments = self._validate_decision(request)
        proposal = await self._load_for_update(proposal_id)

        step = proposal.approve_current(approver, comments)

        if proposal.status == ProposalStatus.APPROVED:
            event = ProposalEvent.proposal_approved(proposal.id, step.role, approver)
        else:
            event = ProposalEvent.step_approved(
                proposal.id, step.role, approver, proposal.current_step_index
            )

        return await self._complete(proposal, event)

    async def reject(self, proposal_id: int, request: StepDecisionRequest) -> Proposal:
        """
        Reject the current step, ending the workflow. Emits PROPOSAL_REJECTED
        with the comments as the reason.

        Raises:
            ValidationException: If the approver is blank or overlong
            ProposalNotFoundException: If the proposal does not exist
            InvalidProposalStateException: If the proposal is not UNDER_REVIEW
                or its current step cannot be decided
            PublishException: If the event could not be published
        """
        approver, comments = self._validate_decision(request)
        proposal = await self._load_for_update(proposal_id)

        step = proposal.reject_current(approver, comments)
        event = ProposalEvent.proposal_rejected(proposal.id, step.role, approver, comments)

        return await self._complete(proposal, event)

    async def _load_for_update(self, proposal_id: int) -> Proposal:
        proposal = await self._proposal_repo.get_for_update(proposal_id)
        if proposal is None:
            raise ProposalNotFoundException(proposal_id)
        return proposal

    def _validate_decision(self, request: StepDecisionRequest) -> tuple[str, Optional[str]]:
        errors = request.validate()
        if errors:
            raise ValidationException("; ".join(errors), field="approver")

        s = self._settings
        approver = require_text(request.approver, "approver", s.max_approver_length)
        comments = optional_text(request.comments, "comments", s.max_description_length)
        return approver, comments

    async def _complete(self, proposal: Proposal, event: ProposalEvent) -> Proposal:
        await self._proposal_repo.update(proposal)
        event = await self._emitter.stage(event)
        await self._proposal_repo.commit()

        final_status = proposal.status.value if proposal.status.is_terminal else None
        record_transition(event.type.value, final_status)
        logger.info(
            "proposal_transitioned",
            proposal_id=proposal.id,
            event_id=event.id,
            event_type=event.type.value,
            status=proposal.status.value,
            current_step_index=proposal.current_step_index,
        )

        await self._emitter.dispatch(event)
        return proposal
