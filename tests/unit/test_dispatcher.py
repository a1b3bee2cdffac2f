"""Unit tests for explicit event routing."""

import pytest

from src.domain.entities import ProposalEvent, ProposalEventType
from src.service.messaging import EventDispatcher


@pytest.mark.asyncio
class TestEventDispatcher:

    async def test_routes_by_type_in_registration_order(self):
        seen = []
        dispatcher = EventDispatcher("test")

        async def first(event):
            seen.append(("first", event.type))

        async def second(event):
            seen.append(("second", event.type))

        dispatcher.register(ProposalEventType.PROPOSAL_SUBMITTED, first)
        dispatcher.register(ProposalEventType.PROPOSAL_SUBMITTED, second)

        await dispatcher.dispatch(ProposalEvent.submitted(1, ["LEGAL"]))

        assert seen == [
            ("first", ProposalEventType.PROPOSAL_SUBMITTED),
            ("second", ProposalEventType.PROPOSAL_SUBMITTED),
        ]

    async def test_unrouted_event_is_ignored(self):
        dispatcher = EventDispatcher("test")

        await dispatcher.dispatch(ProposalEvent.proposal_approved(1, "LEGAL", "alice"))

        assert dispatcher.handlers_for(ProposalEventType.PROPOSAL_APPROVED) == []

    async def test_fallback_receives_unrouted_types(self):
        seen = []
        dispatcher = EventDispatcher("test")

        async def fallback(event):
            seen.append(event.type)

        dispatcher.set_fallback(fallback)

        await dispatcher.dispatch(ProposalEvent.proposal_approved(1, "LEGAL", "alice"))

        assert seen == [ProposalEventType.PROPOSAL_APPROVED]

    async def test_register_all_covers_every_type(self):
        dispatcher = EventDispatcher("test")

        async def handler(event):
            return None

        dispatcher.register_all(handler)

        for event_type in ProposalEventType:
            assert dispatcher.handlers_for(event_type) == [handler]

    async def test_handler_errors_propagate(self):
        dispatcher = EventDispatcher("test")

        async def broken(event):
            raise RuntimeError("boom")

        dispatcher.register_all(broken)

        with pytest.raises(RuntimeError, match="boom"):
            await dispatcher.dispatch(ProposalEvent.submitted(1, ["LEGAL"]))
