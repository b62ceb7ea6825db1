"""
Proposal state machine and credit ledger tests
"""
import pytest

from bidguard.domain.constants import ProposalStatus, can_transition
from bidguard.domain.errors import InvalidTransitionError
from bidguard.infra.mongodb.repositories.proposal_repo import ProposalRepository, GenerationJobRepository
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository


HAPPY_PATH = [
    ProposalStatus.RESEARCHING,
    ProposalStatus.STRATEGIZING,
    ProposalStatus.DRAFTING,
    ProposalStatus.CRITIQUING,
    ProposalStatus.HUMANIZING,
    ProposalStatus.COMPLETE,
]


def test_transition_table():
    assert can_transition("queued", "researching")
    assert can_transition("critiquing", "drafting")
    assert can_transition("drafting", "failed")
    assert can_transition("queued", "failed")

    assert not can_transition("queued", "drafting")
    assert not can_transition("complete", "failed")
    assert not can_transition("failed", "researching")
    assert not can_transition("humanizing", "critiquing")
    assert not can_transition("queued", "unknown")


def test_terminal_statuses():
    assert ProposalStatus.COMPLETE.is_terminal
    assert ProposalStatus.FAILED.is_terminal
    assert not ProposalStatus.DRAFTING.is_terminal


def test_repository_walks_happy_path():
    repo = ProposalRepository()
    proposal = repo.create("user-1", "tender-1", "Cyber SOC Services", idea_injection="Use our Leeds SOC")

    assert proposal["status"] == "queued"
    assert proposal["tender_buyer"] == "Unknown"

    for status in HAPPY_PATH:
        repo.transition(proposal["proposal_id"], status.value)

    stored = repo.get(proposal["proposal_id"])
    assert stored["status"] == "complete"
    assert [h["status"] for h in stored["status_history"]] == ["queued"] + [s.value for s in HAPPY_PATH]


def test_transition_sets_fields():
    repo = ProposalRepository()
    proposal = repo.create("user-1", "tender-1", "Cyber SOC Services")

    updated = repo.transition(proposal["proposal_id"], "researching", research={"client_news": ["x"]})
    assert updated["research"] == {"client_news": ["x"]}
    assert "_id" not in updated


def test_illegal_transition_reports_current_status():
    repo = ProposalRepository()
    proposal = repo.create("user-1", "tender-1", "Cyber SOC Services")

    with pytest.raises(InvalidTransitionError) as exc_info:
        repo.transition(proposal["proposal_id"], "drafting")

    assert exc_info.value.current == "queued"
    assert exc_info.value.target == "drafting"
    assert repo.get(proposal["proposal_id"])["status"] == "queued"


def test_transition_unknown_proposal():
    with pytest.raises(InvalidTransitionError) as exc_info:
        ProposalRepository().transition("prop_missing", "researching")
    assert exc_info.value.current is None


def test_mark_failed():
    repo = ProposalRepository()
    proposal = repo.create("user-1", "tender-1", "Cyber SOC Services")
    repo.transition(proposal["proposal_id"], "researching")

    assert repo.mark_failed(proposal["proposal_id"], "LLM timeout") is True

    stored = repo.get(proposal["proposal_id"])
    assert stored["status"] == "failed"
    assert stored["error"] == "LLM timeout"
    assert stored["final_content"].startswith("## Generation Failed")


def test_mark_failed_leaves_terminal_proposals_alone():
    repo = ProposalRepository()
    proposal = repo.create("user-1", "tender-1", "Cyber SOC Services")
    for status in HAPPY_PATH:
        repo.transition(proposal["proposal_id"], status.value)

    assert repo.mark_failed(proposal["proposal_id"], "late failure") is False
    assert repo.get(proposal["proposal_id"])["status"] == "complete"

    failed = repo.create("user-1", "tender-2", "Another")
    assert repo.mark_failed(failed["proposal_id"], "first") is True
    assert repo.mark_failed(failed["proposal_id"], "second") is False
    assert repo.get(failed["proposal_id"])["error"] == "first"


def test_list_for_user_is_scoped():
    repo = ProposalRepository()
    repo.create("user-1", "tender-1", "One")
    repo.create("user-1", "tender-2", "Two")
    repo.create("user-2", "tender-3", "Three")

    proposals = repo.list_for_user("user-1")
    assert {p["tender_id"] for p in proposals} == {"tender-1", "tender-2"}
    assert repo.get_for_user(proposals[0]["proposal_id"], "user-2") is None


def test_job_repository_status():
    repo = GenerationJobRepository()
    job = repo.create("job-1")
    assert job["status"] == "pending"

    repo.set_status("job-1", "completed", result="# Proposal")
    assert repo.get("job-1")["status"] == "completed"
    assert repo.get("job-1")["result"] == "# Proposal"

    with pytest.raises(ValueError):
        repo.set_status("job-1", "exploded")


# ===================== CREDITS =====================

def test_credits_are_consumed_and_refunded():
    repo = ProfileRepository()
    profile, _ = repo.create_user("Acme Digital Ltd", credits=1)
    user_id = profile["user_id"]

    assert repo.use_credit(user_id) is True
    assert repo.use_credit(user_id) is False
    assert repo.get_credit_status(user_id) == {"remaining": 0, "used": 1, "has_credits": False}

    assert repo.refund_credit(user_id) is True
    assert repo.get_credit_status(user_id) == {"remaining": 1, "used": 0, "has_credits": True}

    # nothing left to refund
    assert repo.refund_credit(user_id) is False


def test_api_key_lookup():
    repo = ProfileRepository()
    profile, api_key = repo.create_user("Acme Digital Ltd")

    assert repo.get_by_api_key(api_key)["user_id"] == profile["user_id"]
    assert repo.get_by_api_key("wrong") is None
    assert "api_key_hash" not in repo.public_view(profile)
    assert profile["api_key_hash"] != api_key


def test_updates_do_not_mutate_caller_dicts():
    repo = ProfileRepository()
    profile, _ = repo.create_user("Acme Digital Ltd")

    updates = {"website": "https://acme.example"}
    assert repo.update_profile(profile["user_id"], updates)
    assert updates == {"website": "https://acme.example"}

    operator_update = {"$set": {"company_size": "11-50"}, "$inc": {"credits": 1}}
    assert repo.update_one({"user_id": profile["user_id"]}, operator_update)
    assert operator_update == {"$set": {"company_size": "11-50"}, "$inc": {"credits": 1}}

    stored = repo.get_by_user_id(profile["user_id"])
    assert stored["website"] == "https://acme.example"
    assert stored["company_size"] == "11-50"
    assert stored["updated_at"] >= stored["created_at"]
