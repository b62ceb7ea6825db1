"""
Company Profile Repository

One profile per bidder account: company details used to qualify tenders,
the hashed API key used to identify the caller, and the credit ledger.
"""
import hashlib
import logging
import secrets
import uuid
from typing import Optional, List, Dict, Any, Tuple
from pymongo import ReturnDocument

from bidguard.config import settings
from bidguard.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = (
    "user_id", "company_name", "business_description", "website", "sectors",
    "iso_certs", "company_size", "credits", "credits_used", "created_at", "updated_at",
)


class ProfileRepository(BaseRepository[Dict[str, Any]]):
    """Repository for company profiles and credits."""

    collection_name = "profiles"

    @staticmethod
    def hash_key(key: str) -> str:
        """SHA-256 hash of API key"""
        return hashlib.sha256(key.encode()).hexdigest()

    @staticmethod
    def public_view(profile: Dict[str, Any]) -> Dict[str, Any]:
        """Strip secrets before returning a profile to a client."""
        return {k: profile.get(k) for k in PUBLIC_FIELDS if k in profile}

    def create_user(
        self,
        company_name: str,
        email: Optional[str] = None,
        credits: Optional[int] = None,
    ) -> Tuple[Dict[str, Any], str]:
        """
        Create a bidder account with a fresh API key.

        Returns:
            (profile, raw_api_key) - the raw key is only visible here
        """
        raw_key = secrets.token_hex(32)
        profile = {
            "user_id": str(uuid.uuid4()),
            "email": email,
            "api_key_hash": self.hash_key(raw_key),
            "is_active": True,
            "company_name": company_name,
            "business_description": None,
            "website": None,
            "sectors": [],
            "iso_certs": [],
            "company_size": None,
            "credits": settings.DEFAULT_CREDITS if credits is None else credits,
            "credits_used": 0,
        }
        stored = self.insert_one(profile)
        logger.info(f"[Profiles] Created account {stored['user_id']} ({company_name})")
        return stored, raw_key

    def get_by_api_key(self, api_key: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"api_key_hash": self.hash_key(api_key), "is_active": True})

    def get_by_user_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"user_id": user_id})

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> bool:
        return self.update_one({"user_id": user_id}, updates)

    def use_credit(self, user_id: str) -> bool:
        """
        Atomically consume one credit.

        Returns:
            True if a credit was consumed, False if none remain
        """
        updated = self.collection.find_one_and_update(
            {"user_id": user_id, "credits": {"$gt": 0}},
            {"$inc": {"credits": -1, "credits_used": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            logger.info(f"[Credits] User has no credits remaining: {user_id}")
            return False
        logger.info(f"[Credits] Used 1 credit for user {user_id}. Remaining: {updated['credits']}")
        return True

    def refund_credit(self, user_id: str) -> bool:
        """Return a credit consumed by a generation that failed."""
        refunded = self.update_one(
            {"user_id": user_id, "credits_used": {"$gt": 0}},
            {"$inc": {"credits": 1, "credits_used": -1}},
        )
        if refunded:
            logger.info(f"[Credits] Refunded 1 credit to user {user_id}")
        return refunded

    def get_credit_status(self, user_id: str) -> Dict[str, Any]:
        profile = self.get_by_user_id(user_id) or {}
        remaining = profile.get("credits", settings.DEFAULT_CREDITS)
        used = profile.get("credits_used", 0)
        return {"remaining": remaining, "used": used, "has_credits": remaining > 0}

    def list_all(self, skip: int = 0, limit: int = 50) -> List[Dict[str, Any]]:
        return [self.public_view(p) for p in self.find_many({}, skip=skip, limit=limit)]


_profile_repo: Optional[ProfileRepository] = None


def get_profile_repo() -> ProfileRepository:
    global _profile_repo
    if _profile_repo is None:
        _profile_repo = ProfileRepository()
    return _profile_repo
