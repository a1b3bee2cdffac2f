"""
Unit tests for the Proposal aggregate state machine.

These tests verify:
1. DRAFT -> UNDER_REVIEW on submit, with a fresh chain of PENDING steps
2. Sequential approval advances the current step, the last one finalizes
3. Rejection is terminal and leaves later steps PENDING
4. Every illegal transition is refused before any field changes
"""

import copy
from decimal import Decimal

import pytest

from src.domain.entities import Proposal, ProposalStatus, StepDecision
from src.domain.exceptions import InvalidProposalStateException


def make_proposal(**overrides) -> Proposal:
    fields = {
        "title": "Roof replacement",
        "applicant_name": "Acme Corp",
        "amount": Decimal("120000.00"),
        "id": 1,
    }
    fields.update(overrides)
    return Proposal(**fields)


CHAIN = ["PEER_REVIEW", "MANAGER_APPROVAL", "COMPLIANCE"]


# =============================================================================
# Submit
# =============================================================================

class TestSubmit:
    """Tests for DRAFT -> UNDER_REVIEW."""

    def test_new_proposal_is_draft_without_steps(self):
        proposal = make_proposal()

        assert proposal.status == ProposalStatus.DRAFT
        assert proposal.steps == []
        assert proposal.submitted_at is None

    def test_submit_builds_pending_steps_in_order(self):
        proposal = make_proposal()

        proposal.submit(CHAIN)

        assert proposal.status == ProposalStatus.UNDER_REVIEW
        assert proposal.current_step_index == 0
        assert [s.role for s in proposal.steps] == CHAIN
        assert [s.step_order for s in proposal.steps] == [0, 1, 2]
        assert all(s.decision == StepDecision.PENDING for s in proposal.steps)
        assert proposal.submitted_at is not None

    def test_submit_twice_is_refused(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)

        with pytest.raises(InvalidProposalStateException):
            proposal.submit(["LEGAL"])

        assert [s.role for s in proposal.steps] == CHAIN

    def test_submit_with_empty_chain_is_refused(self):
        proposal = make_proposal()

        with pytest.raises(InvalidProposalStateException):
            proposal.submit([])

        assert proposal.status == ProposalStatus.DRAFT


# =============================================================================
# Approve
# =============================================================================

class TestApprove:
    """Tests for sequential step approval."""

    def test_approve_advances_to_next_step(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)

        step = proposal.approve_current("alice", "looks fine")

        assert step.role == "PEER_REVIEW"
        assert step.decision == StepDecision.APPROVED
        assert step.approver == "alice"
        assert step.comments == "looks fine"
        assert step.decided_at is not None
        assert proposal.status == ProposalStatus.UNDER_REVIEW
        assert proposal.current_step_index == 1

    def test_approving_every_step_finalizes(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)

        proposal.approve_current("alice")
        proposal.approve_current("bob")
        last = proposal.approve_current("carol")

        assert last.role == "COMPLIANCE"
        assert proposal.status == ProposalStatus.APPROVED
        # Index stays on the last step once finalized
        assert proposal.current_step_index == 2
        assert all(s.decision == StepDecision.APPROVED for s in proposal.steps)

    def test_steps_before_current_are_approved(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)
        proposal.approve_current("alice")
        proposal.approve_current("bob")

        decided = proposal.steps[: proposal.current_step_index]
        assert all(s.decision == StepDecision.APPROVED for s in decided)
        assert proposal.current_step.is_pending

    def test_approve_draft_is_refused(self):
        proposal = make_proposal()

        with pytest.raises(InvalidProposalStateException, match="not UNDER_REVIEW"):
            proposal.approve_current("alice")

    def test_approve_after_final_approval_is_refused(self):
        proposal = make_proposal()
        proposal.submit(["LEGAL"])
        proposal.approve_current("alice")

        with pytest.raises(InvalidProposalStateException, match="status=APPROVED"):
            proposal.approve_current("bob")

    def test_corrupt_index_is_refused_without_changes(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)
        proposal.current_step_index = 7
        before = copy.deepcopy(proposal)

        with pytest.raises(InvalidProposalStateException, match="Invalid current step index=7"):
            proposal.approve_current("alice")

        assert proposal == before

    def test_already_decided_current_step_is_refused(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)
        proposal.steps[0].decision = StepDecision.APPROVED

        with pytest.raises(InvalidProposalStateException, match="already decided"):
            proposal.approve_current("alice")

    def test_under_review_without_steps_is_refused(self):
        proposal = make_proposal(status=ProposalStatus.UNDER_REVIEW)

        with pytest.raises(InvalidProposalStateException, match="No approval steps"):
            proposal.approve_current("alice")


# =============================================================================
# Reject
# =============================================================================

class TestReject:
    """Tests for rejection."""

    def test_reject_is_terminal(self):
        proposal = make_proposal()
        proposal.submit(CHAIN)
        proposal.approve_current("alice")

        step = proposal.reject_current("dave", "non-compliant")

        assert step.role == "MANAGER_APPROVAL"
        assert step.decision == StepDecision.REJECTED
        assert step.comments == "non-compliant"
        assert proposal.status == ProposalStatus.REJECTED
        assert proposal.status.is_terminal
        assert proposal.steps[2].decision == StepDecision.PENDING

    def test_reject_after_rejection_is_refused(self):
        proposal = make_proposal()
        proposal.submit(["LEGAL"])
        proposal.reject_current("dave")

        with pytest.raises(InvalidProposalStateException):
            proposal.reject_current("erin")

        with pytest.raises(InvalidProposalStateException):
            proposal.approve_current("erin")

    def test_reject_draft_is_refused(self):
        proposal = make_proposal()

        with pytest.raises(InvalidProposalStateException):
            proposal.reject_current("dave")

        assert proposal.status == ProposalStatus.DRAFT
