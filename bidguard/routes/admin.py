"""
Admin Routes - Account provisioning

Master admin can create company accounts (each with a one-time API key)
and list existing accounts.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel, Field

from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo
from bidguard.middleware.auth import verify_super_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


class CreateUserRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    credits: Optional[int] = Field(None, ge=0, le=10000, description="Starting credits (default from settings)")


@router.post("/users", status_code=201)
async def create_user(
    request: CreateUserRequest,
    _: dict = Depends(verify_super_admin),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """The raw API key is returned once and never stored."""
    try:
        profile, api_key = repo.create_user(request.company_name, request.email, request.credits)
        logger.info(f"Created account for {request.company_name}")
        return {
            "success": True,
            "profile": repo.public_view(profile),
            "api_key": api_key,
            "warning": "Store this key now. It cannot be retrieved again.",
        }
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}")
        raise HTTPException(500, str(e))


@router.get("/users")
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    _: dict = Depends(verify_super_admin),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    try:
        users = repo.list_all(skip=skip, limit=limit)
        return {"success": True, "users": users, "count": len(users)}
    except Exception as e:
        logger.error(f"Error listing users: {str(e)}")
        raise HTTPException(500, str(e))
