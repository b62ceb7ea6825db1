"""
API Key Auth

- super_admin: platform admin (env var ADMIN_API_KEY)
- user: a company account; its key is stored as a SHA-256 hash on the profile

Authenticated requests receive a user context dict with the user_id used
to scope every query.
"""
import hmac
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from bidguard.config import settings
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_master_key() -> Optional[str]:
    """The admin key, or None when ADMIN_API_KEY is unset (admin routes are then closed)."""
    return settings.ADMIN_API_KEY or None


async def verify_key(
    api_key: Optional[str] = Security(api_key_header),
    repo: ProfileRepository = Depends(get_profile_repo),
) -> dict:
    """
    Verify API key and return user context.

    Returns dict with: role, user_id, company_name
    """
    if not api_key:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "API key required")

    profile = repo.get_by_api_key(api_key)
    if not profile:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Invalid API key")

    return {
        "role": "user",
        "user_id": profile["user_id"],
        "company_name": profile.get("company_name"),
    }


async def verify_super_admin(api_key: Optional[str] = Security(api_key_header)) -> dict:
    """Only platform super admin (master key from .env)."""
    master_key = get_master_key()
    if not master_key or not api_key or not hmac.compare_digest(api_key, master_key):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Super Admin access required")
    return {"role": "super_admin", "user_id": None, "company_name": None}
