"""Audit service - the audit sink and its read API."""

import json
from typing import Optional

import structlog

from src.application.dto import AuditEntryDTO, AuditPage
from src.domain.entities import AuditEntry, ProposalEvent
from src.domain.interfaces import AuditRepository
from src.service.messaging import payload_to_dict

from .proposal_service import check_paging

logger = structlog.get_logger(__name__)


class AuditService:
    """
    Persists one audit row per consumed event.

    Redelivered events produce duplicate rows; the audit trail records
    deliveries, not unique events.
    """

    def __init__(self, audit_repository: AuditRepository):
        self._audit_repo = audit_repository

    async def record(self, event: ProposalEvent) -> AuditEntry:
        entry = AuditEntry(
            event_id=event.id or "",
            event_type=event.type.value,
            proposal_id=event.proposal_id,
            payload_json=json.dumps(payload_to_dict(event.payload), sort_keys=True),
            at=event.at,
        )
        await self._audit_repo.save(entry)

        logger.info(
            "audit_entry_recorded",
            audit_id=entry.id,
            event_id=entry.event_id,
            event_type=entry.event_type,
            proposal_id=entry.proposal_id,
        )
        return entry

    async def list_entries(
        self,
        proposal_id: Optional[int] = None,
        page: int = 1,
        size: int = 20,
    ) -> AuditPage:
        check_paging(page, size)

        entries = await self._audit_repo.list(
            proposal_id=proposal_id,
            limit=size,
            offset=(page - 1) * size,
        )
        total = await self._audit_repo.count(proposal_id=proposal_id)

        return AuditPage(
            items=[AuditEntryDTO.from_entity(e) for e in entries],
            page=page,
            size=size,
            total=total,
        )
