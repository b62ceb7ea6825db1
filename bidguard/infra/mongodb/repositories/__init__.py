"""
MongoDB Repositories - Domain-specific data access.

Repository Pattern Implementation:
- ProposalRepository, GenerationJobRepository - Proposal generation lifecycle
- StepRunRepository - Durable job step outputs
- ProfileRepository - Company profiles, API keys and credits
- TenderRepository, SavedTenderRepository - Tender discovery
- AuditLogRepository - Audit trail
"""

from bidguard.infra.mongodb.repositories.proposal_repo import (
    ProposalRepository,
    GenerationJobRepository,
    get_proposal_repo,
    get_job_repo,
)
from bidguard.infra.mongodb.repositories.step_repo import (
    StepRunRepository,
    get_step_repo,
)
from bidguard.infra.mongodb.repositories.profile_repo import (
    ProfileRepository,
    get_profile_repo,
)
from bidguard.infra.mongodb.repositories.tender_repo import (
    TenderRepository,
    SavedTenderRepository,
    get_tender_repo,
    get_saved_tender_repo,
)
from bidguard.infra.mongodb.repositories.audit_repo import (
    AuditLogRepository,
    get_audit_repo,
)

__all__ = [
    # Proposals
    "ProposalRepository",
    "GenerationJobRepository",
    "get_proposal_repo",
    "get_job_repo",
    # Jobs
    "StepRunRepository",
    "get_step_repo",
    # Profiles
    "ProfileRepository",
    "get_profile_repo",
    # Tenders
    "TenderRepository",
    "SavedTenderRepository",
    "get_tender_repo",
    "get_saved_tender_repo",
    # Audit
    "AuditLogRepository",
    "get_audit_repo",
]
