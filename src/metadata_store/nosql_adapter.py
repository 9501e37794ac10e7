"""
SQLite-backed document adapter.
Stores each document as a JSON string and queries it with json_extract, exposing
the same interface as MongoAdapter.
"""

import sqlite3
import json
import logging
from typing import Dict, Any, List, Optional, Sequence, Tuple
from datetime import datetime

from .schemas import COLLECTION_INDEXES, DOCUMENT_SCHEMAS, DOCUMENT_VALIDATORS

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


class NoSQLAdapter:
    """Document store on top of a local SQLite file"""

    def __init__(self, db_path: str = "cloudbox.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row access by name"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _table(self, collection: str) -> str:
        if collection not in DOCUMENT_SCHEMAS:
            raise ValueError(f"Unknown collection: {collection}")
        return f"{collection}_docs"

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection in DOCUMENT_VALIDATORS:
            try:
                DOCUMENT_VALIDATORS[collection](document)
            except Exception as e:
                logger.error(f"Document validation failed for {collection}: {e}")
                raise ValueError(f"Document validation failed: {e}")

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_document(self, json_str: str) -> Dict[str, Any]:
        """Deserialize JSON string to document"""
        return json.loads(json_str)

    def _build_where(self, query: Optional[Dict[str, Any]]) -> Tuple[str, List[Any]]:
        where_clauses = []
        params: List[Any] = []
        for key, value in (query or {}).items():
            if key == "_id":
                where_clauses.append("doc_id = ?")
                params.append(value)
            else:
                where_clauses.append("json_extract(document, ?) = ?")
                params.extend([f"$.{key}", value])
        if not where_clauses:
            return "", params
        return " WHERE " + " AND ".join(where_clauses), params

    def _build_order_by(self, sort: Optional[SortSpec]) -> Tuple[str, List[Any]]:
        order_clauses = []
        params: List[Any] = []
        for field, direction in sort or []:
            suffix = "DESC" if direction < 0 else "ASC"
            if field == "_id":
                order_clauses.append(f"doc_id {suffix}")
            else:
                order_clauses.append(f"json_extract(document, ?) {suffix}")
                params.append(f"$.{field}")
        if not order_clauses:
            return "", params
        return " ORDER BY " + ", ".join(order_clauses), params

    def init_collections(self) -> None:
        """Initialize document collections (tables) and their indexes"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            for collection, indexes in COLLECTION_INDEXES.items():
                table = self._table(collection)
                cursor.execute(f'''
                    CREATE TABLE IF NOT EXISTS {table} (
                        doc_id TEXT PRIMARY KEY,
                        document TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                ''')
                for field, _direction, unique in indexes:
                    unique_sql = "UNIQUE " if unique else ""
                    cursor.execute(f'''
                        CREATE {unique_sql}INDEX IF NOT EXISTS idx_{collection}_{field}
                        ON {table}(json_extract(document, '$.{field}'))
                    ''')

            conn.commit()
            logger.info("NoSQL collections initialized successfully")

        except Exception as e:
            logger.error(f"Error initializing collections: {e}")
            raise
        finally:
            conn.close()

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document; the document carries its own `_id`"""
        table = self._table(collection)
        self._validate_document(collection, document)
        conn = self._get_connection()
        try:
            doc_id = document["_id"]
            conn.execute(
                f"INSERT INTO {table} (doc_id, document) VALUES (?, ?)",
                (doc_id, self._serialize_document(document)),
            )
            conn.commit()
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id

        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(f"SELECT document FROM {table} WHERE doc_id = ?", (doc_id,)).fetchone()
            if row:
                return self._deserialize_document(row["document"])
            return None

        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Get the first document matching query"""
        results = self.query_documents(collection, query, limit=1)
        return results[0] if results else None

    def update_document_fields(
        self, collection: str, doc_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Merge fields into a document. Returns the updated document, or None if missing.

        The read and the write share one write-locked transaction, so concurrent
        updates of different fields on the same document both survive.
        """
        table = self._table(collection)
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(f"SELECT document FROM {table} WHERE doc_id = ?", (doc_id,)).fetchone()
            if row is None:
                conn.rollback()
                logger.warning(f"No document found to update in {collection} with ID: {doc_id}")
                return None

            document = self._deserialize_document(row["document"])
            document.update(fields)
            self._validate_document(collection, document)

            conn.execute(
                f"UPDATE {table} SET document = ?, updated_at = CURRENT_TIMESTAMP WHERE doc_id = ?",
                (self._serialize_document(document), doc_id),
            )
            conn.commit()
            logger.info(f"Updated document in {collection} with ID: {doc_id}")
            return document

        except Exception as e:
            conn.rollback()
            logger.error(f"Error updating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Delete a document by ID. Returns the removed document, or None if missing."""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(f"SELECT document FROM {table} WHERE doc_id = ?", (doc_id,)).fetchone()
            if row is None:
                conn.rollback()
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")
                return None

            conn.execute(f"DELETE FROM {table} WHERE doc_id = ?", (doc_id,))
            conn.commit()
            logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            return self._deserialize_document(row["document"])

        except Exception as e:
            conn.rollback()
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def query_documents(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query documents with equality filters and an optional sort"""
        table = self._table(collection)
        where_sql, params = self._build_where(query)
        order_sql, order_params = self._build_order_by(sort)
        sql = f"SELECT document FROM {table}{where_sql}{order_sql}"
        params.extend(order_params)
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
            return [self._deserialize_document(row["document"]) for row in rows]

        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def ping(self) -> bool:
        conn = self._get_connection()
        try:
            conn.execute("SELECT 1")
            return True
        finally:
            conn.close()
