"""PostgreSQL implementation of ProposalRepository."""

from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from src.domain.entities import ApprovalStep, Proposal, ProposalStatus, StepDecision
from src.domain.exceptions import ConcurrentModificationException, ProposalNotFoundException
from src.domain.interfaces import ProposalRepository
from src.infrastructure.database.models import ApprovalStepModel, ProposalModel, as_utc


class PostgresProposalRepository(ProposalRepository):
    """
    PostgreSQL implementation of the Proposal repository.

    Writers are serialized twice: get_for_update takes a row lock
    (SELECT ... FOR UPDATE) and every UPDATE is guarded by the version
    column, so a writer holding a stale copy fails instead of
    overwriting a newer decision.
    """

    def __init__(self, session: AsyncSession):
        self._session = session
        self._models: Dict[int, ProposalModel] = {}

    async def add(self, proposal: Proposal) -> Proposal:
        """Persist a new proposal and populate its generated id."""
        model = ProposalModel(
            title=proposal.title,
            applicant_name=proposal.applicant_name,
            amount=proposal.amount,
            description=proposal.description,
            approval_chain=list(proposal.approval_chain) if proposal.approval_chain else None,
            status=proposal.status.value,
            current_step_index=proposal.current_step_index,
            created_at=proposal.created_at,
            updated_at=proposal.updated_at,
            submitted_at=proposal.submitted_at,
            steps=[self._to_step_model(step) for step in proposal.steps],
        )

        self._session.add(model)
        await self._session.flush()

        self._models[model.id] = model
        self._sync_generated(proposal, model)
        return proposal

    async def get_by_id(self, proposal_id: int) -> Optional[Proposal]:
        """Retrieve a proposal by ID."""
        model = await self._load(proposal_id, for_update=False)
        if model is None:
            return None
        return self._to_entity(model)

    async def get_for_update(self, proposal_id: int) -> Optional[Proposal]:
        """Retrieve a proposal and hold its row lock until commit."""
        model = await self._load(proposal_id, for_update=True)
        if model is None:
            return None
        self._models[model.id] = model
        return self._to_entity(model)

    async def update(self, proposal: Proposal) -> Proposal:
        """Write back a mutated proposal and its step sequence."""
        model = self._models.get(proposal.id)
        if model is None:
            model = await self._load(proposal.id, for_update=True)
            if model is None:
                raise ProposalNotFoundException(proposal.id)
            self._models[model.id] = model

        if model.version != proposal.version:
            raise ConcurrentModificationException(proposal.id)

        if any(step.id is None for step in proposal.steps):
            # The chain was (re)built: replace every stored step
            if model.steps:
                model.steps.clear()
                await self._session.flush()
            model.steps = [self._to_step_model(step) for step in proposal.steps]
        else:
            stored = {step_model.id: step_model for step_model in model.steps}
            for step in proposal.steps:
                step_model = stored[step.id]
                step_model.decision = step.decision.value
                step_model.approver = step.approver
                step_model.comments = step.comments
                step_model.decided_at = step.decided_at

        model.status = proposal.status.value
        model.current_step_index = proposal.current_step_index
        model.updated_at = proposal.updated_at
        model.submitted_at = proposal.submitted_at

        try:
            await self._session.flush()
        except StaleDataError as e:
            raise ConcurrentModificationException(proposal.id) from e

        self._sync_generated(proposal, model)
        return proposal

    async def list(
        self,
        status: Optional[ProposalStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Proposal]:
        """Retrieve proposals ordered by id ascending."""
        stmt = select(ProposalModel).options(selectinload(ProposalModel.steps))
        if status is not None:
            stmt = stmt.where(ProposalModel.status == status.value)
        stmt = stmt.order_by(ProposalModel.id.asc()).limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def count(self, status: Optional[ProposalStatus] = None) -> int:
        stmt = select(func.count()).select_from(ProposalModel)
        if status is not None:
            stmt = stmt.where(ProposalModel.status == status.value)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def commit(self) -> None:
        await self._session.commit()

    async def _load(self, proposal_id: int, for_update: bool) -> Optional[ProposalModel]:
        stmt = (
            select(ProposalModel)
            .options(selectinload(ProposalModel.steps))
            .where(ProposalModel.id == proposal_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _sync_generated(self, proposal: Proposal, model: ProposalModel) -> None:
        """Copy database-generated values back onto the entity."""
        proposal.id = model.id
        proposal.version = model.version
        for step, step_model in zip(proposal.steps, model.steps):
            step.id = step_model.id

    def _to_step_model(self, step: ApprovalStep) -> ApprovalStepModel:
        return ApprovalStepModel(
            step_order=step.step_order,
            role=step.role,
            decision=step.decision.value,
            approver=step.approver,
            comments=step.comments,
            decided_at=step.decided_at,
        )

    def _to_entity(self, model: ProposalModel) -> Proposal:
        """Convert database model to domain entity."""
        steps = [
            ApprovalStep(
                id=step_model.id,
                step_order=step_model.step_order,
                role=step_model.role,
                decision=StepDecision(step_model.decision),
                approver=step_model.approver,
                comments=step_model.comments,
                decided_at=as_utc(step_model.decided_at),
            )
            for step_model in model.steps
        ]

        return Proposal(
            id=model.id,
            title=model.title,
            applicant_name=model.applicant_name,
            amount=model.amount,
            description=model.description,
            approval_chain=list(model.approval_chain) if model.approval_chain else None,
            status=ProposalStatus(model.status),
            current_step_index=model.current_step_index,
            steps=steps,
            version=model.version,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            submitted_at=as_utc(model.submitted_at),
        )
