"""
Base Repository Pattern

Base class for all MongoDB repositories.
Provides common CRUD operations and query helpers.
"""
import logging
from typing import Optional, List, Dict, Any, TypeVar, Generic
from datetime import datetime
from pymongo.collection import Collection

from bidguard.infra.mongodb.connection import get_collection

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Dict[str, Any])


class BaseRepository(Generic[T]):
    """
    Base repository with common CRUD operations.

    Subclasses should set collection_name class attribute. Documents are
    addressed by their own string id fields (proposal_id, job_id, ...), so
    the Mongo `_id` is always stripped from results.
    """

    collection_name: str = None  # Override in subclass

    def __init__(self):
        if not self.collection_name:
            raise ValueError(f"collection_name must be set in {self.__class__.__name__}")

    @property
    def collection(self) -> Collection:
        """Get the MongoDB collection."""
        return get_collection(self.collection_name)

    @staticmethod
    def _clean(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if document is not None:
            document.pop("_id", None)
        return document

    def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a single document.

        Args:
            document: Document to insert

        Returns:
            The stored document (without `_id`)
        """
        now = datetime.utcnow()
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)
        self.collection.insert_one(document)
        return self._clean(document)

    def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find a single document matching query."""
        return self._clean(self.collection.find_one(query))

    def find_many(
        self,
        query: Dict[str, Any] = None,
        skip: int = 0,
        limit: int = 50,
        sort: List[tuple] = None
    ) -> List[Dict[str, Any]]:
        """
        Find multiple documents.

        Args:
            query: MongoDB query dict
            skip: Number of documents to skip
            limit: Maximum documents to return
            sort: List of (field, direction) tuples

        Returns:
            List of documents
        """
        cursor = self.collection.find(query or {})

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)
        return [self._clean(doc) for doc in cursor]

    def update_one(
        self,
        query: Dict[str, Any],
        update: Dict[str, Any],
        upsert: bool = False
    ) -> bool:
        """
        Update a single document.

        Args:
            query: Query to find document
            update: Update operations (plain dicts are wrapped in $set)
            upsert: Create if not exists

        Returns:
            True if a document matched or was upserted
        """
        # Never mutate the caller's dicts
        if any(key.startswith("$") for key in update):
            update = dict(update)
            update["$set"] = dict(update.get("$set") or {})
        else:
            update = {"$set": dict(update)}

        update["$set"]["updated_at"] = datetime.utcnow()

        result = self.collection.update_one(query, update, upsert=upsert)
        return result.matched_count > 0 or result.upserted_id is not None

    def delete_one(self, query: Dict[str, Any]) -> bool:
        """Delete a single document. Returns True if one was deleted."""
        result = self.collection.delete_one(query)
        return result.deleted_count > 0

    def count(self, query: Dict[str, Any] = None) -> int:
        """Count documents matching query."""
        return self.collection.count_documents(query or {})
