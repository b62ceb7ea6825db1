"""
Tender Repositories

- TenderRepository: discovered tenders (Contracts Finder feed or seeded)
- SavedTenderRepository: tenders a bidder has shortlisted
"""
import logging
import re
from typing import Optional, List, Dict, Any
from pymongo import DESCENDING, UpdateOne

from bidguard.infra.mongodb.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TenderRepository(BaseRepository[Dict[str, Any]]):
    """Repository for discovered tenders."""

    collection_name = "tenders"

    def upsert_many(self, tenders: List[Dict[str, Any]]) -> int:
        """
        Insert or refresh tenders keyed by tender_id.

        Returns:
            Number of tenders written
        """
        if not tenders:
            return 0
        operations = [
            UpdateOne({"tender_id": t["tender_id"]}, {"$set": t}, upsert=True)
            for t in tenders
        ]
        result = self.collection.bulk_write(operations, ordered=False)
        written = result.upserted_count + result.modified_count
        logger.info(f"[Tenders] Upserted {written} tenders")
        return written

    def get(self, tender_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one({"tender_id": tender_id})

    def search(
        self,
        industry: Optional[str] = None,
        query: Optional[str] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """Filter by industry and/or a case-insensitive text match on title, buyer and description."""
        mongo_query: Dict[str, Any] = {}
        if industry:
            mongo_query["industry"] = industry
        if query:
            pattern = {"$regex": re.escape(query), "$options": "i"}
            mongo_query["$or"] = [
                {"title": pattern},
                {"buyer": pattern},
                {"description": pattern},
            ]
        # deadline is display text ("Rolling" included); order on the parsed date
        return self.find_many(
            mongo_query,
            limit=limit,
            sort=[("fetched_at", DESCENDING), ("deadline_at", DESCENDING)],
        )


class SavedTenderRepository(BaseRepository[Dict[str, Any]]):
    """Repository for tenders saved by a user."""

    collection_name = "saved_tenders"

    def save(self, user_id: str, tender: Dict[str, Any]) -> bool:
        return self.update_one(
            {"user_id": user_id, "tender_id": tender["tender_id"]},
            {"$set": {"tender_data": tender, "status": "saved"}},
            upsert=True,
        )

    def list_for_user(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self.find_many(
            {"user_id": user_id},
            limit=limit,
            sort=[("updated_at", DESCENDING)],
        )


_tender_repo: Optional[TenderRepository] = None
_saved_tender_repo: Optional[SavedTenderRepository] = None


def get_tender_repo() -> TenderRepository:
    global _tender_repo
    if _tender_repo is None:
        _tender_repo = TenderRepository()
    return _tender_repo


def get_saved_tender_repo() -> SavedTenderRepository:
    global _saved_tender_repo
    if _saved_tender_repo is None:
        _saved_tender_repo = SavedTenderRepository()
    return _saved_tender_repo
