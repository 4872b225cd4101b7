# backend/docinsight/services/documents.py
from __future__ import annotations

import logging
import os
import time
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import config
from ..errors import DocumentNotFound, StorageError, UploadError
from ..models import Document
from ..schemas.common import UploadStatus
from .storage import BlobStore

logger = logging.getLogger(__name__)

ACCEPTED_TYPES = {
    "application/pdf",
    "text/plain",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

def validate_upload(filename: str, content_type: str | None, size: int) -> None:
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype not in ACCEPTED_TYPES and not ctype.startswith("text/"):
        raise UploadError("Please upload a PDF, text, or document file", status_code=400)
    if size > config.MAX_UPLOAD_BYTES:
        raise UploadError(
            f"File size must be less than {config.MAX_UPLOAD_BYTES // (1024 * 1024)}MB", status_code=413
        )
    if not filename:
        raise UploadError("File name is required", status_code=400)

def _blob_path(user_id: str, filename: str) -> str:
    return f"{user_id}/{int(time.time() * 1000)}_{os.path.basename(filename)}"

def upload_document(
    db: Session,
    store: BlobStore,
    data: bytes,
    filename: str,
    content_type: str | None,
    user_id: str,
) -> Document:
    """
    Two-step write: blob first, then the documents row.
    If the row insert fails the blob is deleted again (best effort).
    """
    validate_upload(filename, content_type, len(data))
    ctype = content_type or "application/octet-stream"

    try:
        locator = store.put(_blob_path(user_id, filename), data, ctype)
    except StorageError as e:
        raise UploadError(str(e), status_code=502) from e

    doc = Document(
        user_id=user_id,
        filename=os.path.basename(filename),
        file_size=len(data),
        file_type=ctype,
        storage_path=locator,
        upload_status=UploadStatus.completed.value,
    )
    try:
        db.add(doc)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        _compensate_blob(store, locator)
        raise UploadError(f"Database insert failed: {e}", status_code=502) from e

    logger.info("Uploaded %s as document %s (%d bytes)", doc.filename, doc.id, doc.file_size)
    return doc

def _compensate_blob(store: BlobStore, locator: str) -> None:
    try:
        store.delete(locator)
    except Exception:
        logger.exception("Could not remove orphaned blob %s", locator)

def get_documents(db: Session, user_id: str) -> List[Document]:
    return (
        db.query(Document)
        .options(selectinload(Document.analysis), selectinload(Document.insights))
        .filter(Document.user_id == user_id)
        .order_by(Document.created_at.desc())
        .all()
    )

def get_document(db: Session, document_id: str) -> Document:
    doc = (
        db.query(Document)
        .options(selectinload(Document.analysis), selectinload(Document.insights))
        .filter(Document.id == document_id)
        .one_or_none()
    )
    if doc is None:
        raise DocumentNotFound(f"Document {document_id} not found")
    return doc

def delete_document(db: Session, store: BlobStore, document_id: str, locator: str | None = None) -> None:
    """Remove the blob, then the row (analysis and insights cascade)."""
    doc = db.get(Document, document_id)
    if doc is None:
        raise DocumentNotFound(f"Document {document_id} not found")

    store.delete(locator or doc.storage_path)
    try:
        db.delete(doc)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to delete document: {e}") from e
    logger.info("Deleted document %s", document_id)
