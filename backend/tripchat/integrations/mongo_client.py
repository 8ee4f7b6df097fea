"""MongoDB persistence for conversations: messages, collected slots and the latest itinerary.

This module uses pymongo synchronously and safely no-ops when MONGODB_URI
is not configured, so it won't break local runs or CI.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from tripchat.config import get_settings
from tripchat.integrations.exceptions import UpstreamAPIError

logger = logging.getLogger(__name__)

COLLECTION = "conversations"

_client: Optional[MongoClient] = None


def get_mongo_client() -> Optional[MongoClient]:
    global _client
    if _client is not None:
        return _client
    uri = get_settings().mongodb_uri
    if not uri:
        logger.warning("MONGODB_URI not set; conversation persistence disabled")
        return None
    try:
        _client = MongoClient(uri, serverSelectionTimeoutMS=3000)
    except PyMongoError as e:
        # InvalidURI / ConfigurationError from a malformed MONGODB_URI
        raise UpstreamAPIError(f"Connecting to MongoDB failed: {e}") from e
    return _client


def get_collection(name: str = COLLECTION) -> Optional[Collection]:
    client = get_mongo_client()
    if client is None:
        return None
    return client[get_settings().mongodb_db][name]


class ConversationRepository:
    """
    Stores one document per conversation, keyed by conversation_id.

    Every method is a no-op (None / [] / False) when no collection is
    available. Driver failures surface as UpstreamAPIError.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection
        self._resolved = collection is not None

    @property
    def collection(self) -> Optional[Collection]:
        if not self._resolved:
            self._collection = get_collection()
            self._resolved = True
        return self._collection

    @property
    def enabled(self) -> bool:
        return self.collection is not None

    def save(self, conversation_id: str, record: Dict[str, Any]) -> None:
        col = self.collection
        if col is None:
            return
        now = int(time.time())
        patch = {**record, "conversation_id": conversation_id, "updated_at": now}
        try:
            col.update_one(
                {"conversation_id": conversation_id},
                {"$set": patch, "$setOnInsert": {"created_at": now}},
                upsert=True,
            )
        except PyMongoError as e:
            raise UpstreamAPIError(f"Saving conversation {conversation_id} failed: {e}") from e

    def load(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        col = self.collection
        if col is None:
            return None
        try:
            doc = col.find_one({"conversation_id": conversation_id}, {"_id": 0})
        except PyMongoError as e:
            raise UpstreamAPIError(f"Loading conversation {conversation_id} failed: {e}") from e
        return doc

    def list_recent(self, limit: int = 50) -> List[Dict[str, Any]]:
        col = self.collection
        if col is None:
            return []
        projection = {"_id": 0, "conversation_id": 1, "title": 1, "phase": 1, "created_at": 1, "updated_at": 1}
        try:
            cursor = col.find({}, projection).sort("updated_at", DESCENDING).limit(limit)
            return list(cursor)
        except PyMongoError as e:
            raise UpstreamAPIError(f"Listing conversations failed: {e}") from e

    def delete(self, conversation_id: str) -> bool:
        col = self.collection
        if col is None:
            return False
        try:
            res = col.delete_one({"conversation_id": conversation_id})
        except PyMongoError as e:
            raise UpstreamAPIError(f"Deleting conversation {conversation_id} failed: {e}") from e
        return res.deleted_count > 0
