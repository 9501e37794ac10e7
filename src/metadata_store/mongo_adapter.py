"""
MongoDB adapter for document-based operations.
Provides identical interface to NoSQLAdapter but uses native MongoDB collections.
"""

import logging
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import ConnectionFailure

from .nosql_adapter import SortSpec
from .schemas import COLLECTION_INDEXES, DATETIME_FIELDS, DOCUMENT_SCHEMAS, DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "cloudbox"


class MongoAdapter:
    """MongoDB adapter for document-based database operations"""

    def __init__(self, connection_string: str, db_name: Optional[str] = None):
        if not connection_string:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI or pass connection_string")

        self.connection_string = connection_string
        self.db_name = db_name
        self.client = None
        self.db = None
        self._connect()

    def _connect(self) -> None:
        """Establish MongoDB connection"""
        try:
            self.client = MongoClient(self.connection_string, tz_aware=True)
            db_name = self.db_name
            if not db_name:
                # Fall back to the path segment of the URI
                db_name = self.connection_string.rsplit('/', 1)[-1].split('?')[0] or DEFAULT_DB_NAME
            self.db = self.client[db_name]

            self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {db_name}")

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def _collection(self, collection: str):
        if collection not in DOCUMENT_SCHEMAS:
            raise ValueError(f"Unknown collection: {collection}")
        return self.db[collection]

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection in DOCUMENT_VALIDATORS:
            try:
                DOCUMENT_VALIDATORS[collection](document)
            except Exception as e:
                logger.error(f"Document validation failed for {collection}: {e}")
                raise ValueError(f"Document validation failed: {e}")

    def _to_mongo(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Store known timestamp fields as native datetimes so they sort correctly"""
        converted = dict(document)
        for field in DATETIME_FIELDS.get(collection, ()):
            value = converted.get(field)
            if isinstance(value, str):
                converted[field] = datetime.fromisoformat(value.replace('Z', '+00:00'))
        return converted

    def _from_mongo(self, collection: str, document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if document is None:
            return None
        converted = dict(document)
        for field in DATETIME_FIELDS.get(collection, ()):
            value = converted.get(field)
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                converted[field] = value.isoformat(timespec="microseconds")
        return converted

    def init_collections(self) -> None:
        """Initialize MongoDB collections and indexes"""
        try:
            for collection_name, indexes in COLLECTION_INDEXES.items():
                collection = self.db[collection_name]
                for field, direction, unique in indexes:
                    collection.create_index([(field, direction)], unique=unique)

            logger.info("MongoDB collections and indexes initialized successfully")

        except Exception as e:
            logger.error(f"Error initializing MongoDB collections: {e}")
            raise

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document in the collection"""
        try:
            self._validate_document(collection, document)
            self._collection(collection).insert_one(self._to_mongo(collection, document))
            doc_id = document["_id"]
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id

        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        return self.find_one(collection, {"_id": doc_id})

    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Get the first document matching query"""
        try:
            return self._from_mongo(collection, self._collection(collection).find_one(query))

        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise

    def update_document_fields(
        self, collection: str, doc_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Merge fields into a document. Returns the updated document, or None if missing."""
        try:
            current = self.get_document(collection, doc_id)
            if current is None:
                logger.warning(f"No document found to update in {collection} with ID: {doc_id}")
                return None
            self._validate_document(collection, {**current, **fields})

            updated = self._collection(collection).find_one_and_update(
                {"_id": doc_id},
                {"$set": self._to_mongo(collection, fields)},
                return_document=ReturnDocument.AFTER,
            )
            if updated is None:
                logger.warning(f"Document {doc_id} in {collection} disappeared during update")
                return None

            logger.info(f"Updated document in {collection} with ID: {doc_id}")
            return self._from_mongo(collection, updated)

        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise

    def delete_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Delete a document by ID. Returns the removed document, or None if missing."""
        try:
            removed = self._collection(collection).find_one_and_delete({"_id": doc_id})
            if removed is None:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")
                return None

            logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            return self._from_mongo(collection, removed)

        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise

    def query_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query documents with filters"""
        try:
            cursor = self._collection(collection).find(query or {})
            if sort:
                cursor = cursor.sort([
                    (field, DESCENDING if direction < 0 else ASCENDING) for field, direction in sort
                ])
            if offset:
                cursor = cursor.skip(offset)
            if limit is not None:
                cursor = cursor.limit(limit)
            return [self._from_mongo(collection, doc) for doc in cursor]

        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise

    def ping(self) -> bool:
        self.client.admin.command('ping')
        return True

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")
