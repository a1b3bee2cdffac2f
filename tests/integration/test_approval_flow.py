"""
Integration tests for the approval workflow over HTTP.

These tests verify:
1. The default three-step chain approves a proposal and emits one event per step
2. An explicit chain with a rejection emits PROPOSAL_REJECTED with the reason
3. Illegal transitions are refused with 409 and publish nothing
4. A publish failure returns 502 while the state change stays committed
"""

import pytest
from httpx import AsyncClient


async def create_proposal(client: AsyncClient, body: dict) -> int:
    response = await client.post("/v1/proposals", json=body)
    assert response.status_code == 201
    return response.json()["id"]


class TestApprovalScenario:

    @pytest.mark.asyncio
    async def test_default_chain_to_approved(
        self,
        client: AsyncClient,
        proposal_request: dict,
        mock_publisher,
    ):
        pid = await create_proposal(client, proposal_request)

        response = await client.post(f"/v1/proposals/{pid}/submit")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "UNDER_REVIEW"
        assert [s["role"] for s in data["steps"]] == [
            "PEER_REVIEW",
            "MANAGER_APPROVAL",
            "COMPLIANCE",
        ]
        assert data["submitted_at"] is not None

        for approver, expected_index in (("alice", 1), ("bob", 2)):
            response = await client.post(
                f"/v1/proposals/{pid}/approve", json={"approver": approver}
            )
            assert response.status_code == 200
            assert response.json()["current_step_index"] == expected_index

        response = await client.post(
            f"/v1/proposals/{pid}/approve",
            json={"approver": "carol", "comments": "all clear"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "APPROVED"
        assert [s["decision"] for s in data["steps"]] == ["APPROVED"] * 3
        assert data["steps"][2]["approver"] == "carol"
        assert data["steps"][2]["comments"] == "all clear"

        assert mock_publisher.types() == [
            "PROPOSAL_SUBMITTED",
            "STEP_APPROVED",
            "STEP_APPROVED",
            "PROPOSAL_APPROVED",
        ]
        first_step = mock_publisher.events[1].payload
        assert (first_step.role, first_step.approver, first_step.next_step) == (
            "PEER_REVIEW",
            "alice",
            1,
        )
        final = mock_publisher.events[3].payload
        assert (final.role, final.approver) == ("COMPLIANCE", "carol")

    @pytest.mark.asyncio
    async def test_stored_state_matches_response(
        self,
        client: AsyncClient,
        proposal_request: dict,
    ):
        pid = await create_proposal(client, proposal_request)
        await client.post(f"/v1/proposals/{pid}/submit")
        await client.post(f"/v1/proposals/{pid}/approve", json={"approver": "alice"})

        data = (await client.get(f"/v1/proposals/{pid}")).json()

        assert data["status"] == "UNDER_REVIEW"
        assert data["current_step_index"] == 1
        assert data["steps"][0]["decision"] == "APPROVED"
        assert data["steps"][0]["decided_at"] is not None
        assert data["steps"][1]["decision"] == "PENDING"


class TestRejectionScenario:

    @pytest.mark.asyncio
    async def test_explicit_chain_rejected(
        self,
        client: AsyncClient,
        proposal_request: dict,
        mock_publisher,
    ):
        pid = await create_proposal(client, proposal_request)

        response = await client.post(f"/v1/proposals/{pid}/submit", json=["LEGAL"])
        assert response.status_code == 200
        assert [s["role"] for s in response.json()["steps"]] == ["LEGAL"]

        response = await client.post(
            f"/v1/proposals/{pid}/reject",
            json={"approver": "dave", "comments": "non-compliant"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "REJECTED"
        assert data["steps"][0]["decision"] == "REJECTED"

        assert mock_publisher.types() == ["PROPOSAL_SUBMITTED", "PROPOSAL_REJECTED"]
        assert mock_publisher.events[0].payload.chain == ["LEGAL"]
        payload = mock_publisher.events[1].payload
        assert (payload.role, payload.approver, payload.reason) == (
            "LEGAL",
            "dave",
            "non-compliant",
        )


class TestRefusedTransitions:

    @pytest.mark.asyncio
    async def test_approve_draft_returns_409(
        self,
        client: AsyncClient,
        proposal_request: dict,
        mock_publisher,
    ):
        pid = await create_proposal(client, proposal_request)

        response = await client.post(f"/v1/proposals/{pid}/approve", json={"approver": "alice"})

        assert response.status_code == 409
        assert response.json()["error"] == "INVALID_PROPOSAL_STATE"
        assert mock_publisher.call_count == 0

    @pytest.mark.asyncio
    async def test_submit_twice_returns_409(self, client: AsyncClient, proposal_request: dict):
        pid = await create_proposal(client, proposal_request)
        await client.post(f"/v1/proposals/{pid}/submit")

        response = await client.post(f"/v1/proposals/{pid}/submit")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_decide_after_final_returns_409(
        self,
        client: AsyncClient,
        proposal_request: dict,
        mock_publisher,
    ):
        pid = await create_proposal(client, proposal_request)
        await client.post(f"/v1/proposals/{pid}/submit", json=["LEGAL"])
        await client.post(f"/v1/proposals/{pid}/approve", json={"approver": "erin"})

        approve = await client.post(f"/v1/proposals/{pid}/approve", json={"approver": "erin"})
        reject = await client.post(f"/v1/proposals/{pid}/reject", json={"approver": "erin"})

        assert approve.status_code == 409
        assert reject.status_code == 409
        assert mock_publisher.types() == ["PROPOSAL_SUBMITTED", "PROPOSAL_APPROVED"]

    @pytest.mark.asyncio
    async def test_blank_approver_returns_400(self, client: AsyncClient, proposal_request: dict):
        pid = await create_proposal(client, proposal_request)
        await client.post(f"/v1/proposals/{pid}/submit")

        response = await client.post(f"/v1/proposals/{pid}/approve", json={"approver": " "})

        assert response.status_code == 400
        data = (await client.get(f"/v1/proposals/{pid}")).json()
        assert data["current_step_index"] == 0

    @pytest.mark.asyncio
    async def test_overlong_role_returns_400(self, client: AsyncClient, proposal_request: dict):
        pid = await create_proposal(client, proposal_request)

        response = await client.post(f"/v1/proposals/{pid}/submit", json=["R" * 101])

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        data = (await client.get(f"/v1/proposals/{pid}")).json()
        assert data["status"] == "DRAFT"

    @pytest.mark.asyncio
    async def test_overlong_approver_returns_400(self, client: AsyncClient, proposal_request: dict):
        pid = await create_proposal(client, proposal_request)
        await client.post(f"/v1/proposals/{pid}/submit")

        response = await client.post(
            f"/v1/proposals/{pid}/approve", json={"approver": "a" * 256}
        )

        assert response.status_code == 400
        data = (await client.get(f"/v1/proposals/{pid}")).json()
        assert data["current_step_index"] == 0

    @pytest.mark.asyncio
    async def test_unknown_proposal_returns_404(self, client: AsyncClient):
        response = await client.post("/v1/proposals/404/submit")

        assert response.status_code == 404


class TestPublishFailure:

    @pytest.mark.asyncio
    async def test_returns_502_with_state_committed(
        self,
        client_with_failing_publisher: AsyncClient,
        proposal_request: dict,
        failing_publisher,
    ):
        client = client_with_failing_publisher
        pid = await create_proposal(client, proposal_request)

        response = await client.post(f"/v1/proposals/{pid}/submit")

        assert response.status_code == 502
        assert response.json()["error"] == "EVENT_PUBLISH_FAILED"
        assert failing_publisher.call_count == 1

        data = (await client.get(f"/v1/proposals/{pid}")).json()
        assert data["status"] == "UNDER_REVIEW"
        assert len(data["steps"]) == 3
