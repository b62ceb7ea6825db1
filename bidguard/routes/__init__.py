"""
Routes package - exports all API routers
"""
from bidguard.routes.proposals import router as proposals_router
from bidguard.routes.jobs import router as jobs_router
from bidguard.routes.red_team import router as red_team_router
from bidguard.routes.tenders import router as tenders_router
from bidguard.routes.profile import router as profile_router
from bidguard.routes.admin import router as admin_router

__all__ = [
    "proposals_router",
    "jobs_router",
    "red_team_router",
    "tenders_router",
    "profile_router",
    "admin_router",
]
