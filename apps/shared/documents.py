"""
Document store on top of SQLAlchemy

Schema-flexible records addressed by collection name and document id.
Every collection shares one `documents` table; the record body is kept in a
JSON column (JSONB on PostgreSQL) and the store maintains the timestamps.

Usage:
    from apps.shared.documents import DocumentStore

    store = DocumentStore(db, "blogs")
    doc = store.insert({"title": "Hello", "body": "..."})
    store.update_by_id(doc.id, {"title": "Hello again"})
"""

import itertools
import logging
import re
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

from apps.shared.database import Base

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")

# 3-byte counter, random start like BSON ObjectIds
_counter = itertools.count(secrets.randbelow(0xFFFFFF))


def new_document_id() -> str:
    """
    Generate a 24 character hex id.

    Layout (12 bytes): 4-byte creation time in seconds, 5 random bytes,
    3-byte wrapping counter.
    """
    seconds = int(time.time()) & 0xFFFFFFFF
    count = next(_counter) & 0xFFFFFF
    return f"{seconds:08x}{secrets.token_hex(5)}{count:06x}"


def is_valid_id(value: Any) -> bool:
    """True if value is a well-formed document id."""
    return isinstance(value, str) and _ID_PATTERN.fullmatch(value) is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """
    A single record in a collection.

    - collection: logical collection name (e.g. "blogs")
    - id: store-assigned id, see new_document_id()
    - data: the record body
    - created_at / updated_at: maintained by DocumentStore
    """
    __tablename__ = "documents"

    id = Column(String(24), primary_key=True, default=new_document_id)
    collection = Column(String(100), nullable=False)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_documents_collection_created_at", "collection", "created_at"),
    )

    def to_dict(self) -> dict:
        """Convert document to dictionary for API responses."""
        return {
            "id": self.id,
            **self.data,  # Spread the record body into the response
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class DocumentStore:
    """
    Collection-scoped access to the documents table.

    Every write commits immediately. On failure the session is rolled back
    and the exception propagates to the caller.
    """

    def __init__(self, db: Session, collection: str):
        self.db = db
        self.collection = collection

    def _query(self):
        return self.db.query(Document).filter(Document.collection == self.collection)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def insert(self, data: Dict[str, Any]) -> Document:
        now = _utcnow()
        document = Document(
            id=new_document_id(),
            collection=self.collection,
            data=dict(data),
            created_at=now,
            updated_at=now,
        )
        self.db.add(document)
        self._commit()
        self.db.refresh(document)
        logger.info(f"Inserted document {document.id} into '{self.collection}'")
        return document

    def find(self, newest_first: bool = True) -> List[Document]:
        order = Document.created_at.desc() if newest_first else Document.created_at.asc()
        return self._query().order_by(order).all()

    def find_by_id(self, document_id: str) -> Optional[Document]:
        return self._query().filter(Document.id == document_id).first()

    def update_by_id(
        self,
        document_id: str,
        changes: Dict[str, Any],
        schema: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
    ) -> Optional[Document]:
        """
        Merge changes into a stored document.

        Args:
            document_id: Id of the document to update
            changes: Fields to set on the record body
            schema: Optional callable run on the merged body before writing.
                Whatever it raises propagates and nothing is written.

        Returns:
            The updated document, or None if no document has that id
        """
        document = self.find_by_id(document_id)
        if document is None:
            return None

        merged = {**document.data, **changes}
        if schema is not None:
            merged = schema(merged)

        # Reassign rather than mutate; plain JSON columns do not track changes
        document.data = merged
        document.updated_at = _utcnow()
        self._commit()
        self.db.refresh(document)
        logger.info(f"Updated document {document.id} in '{self.collection}'")
        return document

    def delete_by_id(self, document_id: str) -> Optional[dict]:
        """Remove a document. Returns its last state as a dict, or None."""
        document = self.find_by_id(document_id)
        if document is None:
            return None

        snapshot = document.to_dict()
        self.db.delete(document)
        self._commit()
        logger.info(f"Deleted document {document_id} from '{self.collection}'")
        return snapshot
