"""
Application Services - Business Logic Layer

Services contain business logic extracted from route handlers,
coordinating repositories, agents and background jobs.
"""

from bidguard.services.audit_service import AuditService, get_audit_service
from bidguard.services.proposal_service import ProposalService, StartProposalRequest, get_proposal_service
from bidguard.services.tender_service import TenderService, get_tender_service
from bidguard.services.companies_house_service import CompaniesHouseService, get_companies_house_service
from bidguard.services.job_service import JobService, get_job_service

__all__ = [
    "AuditService",
    "get_audit_service",
    "ProposalService",
    "StartProposalRequest",
    "get_proposal_service",
    "TenderService",
    "get_tender_service",
    "CompaniesHouseService",
    "get_companies_house_service",
    "JobService",
    "get_job_service",
]
