# backend/docinsight/services/tracker.py
r"""
Per-document processing lifecycle.

    (none) --start--> processing --complete--> completed --record_insights--> (insights row)
                                 \--fail-----> failed

completed and failed are terminal. Insights are written once, only after
completed, and never updated.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import InvalidTransition, StorageError
from ..models import DocumentAnalysis, DocumentInsights
from ..schemas.common import ProcessingStatus
from ..schemas.insights import DocumentInsightsData

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    None: {ProcessingStatus.processing},
    ProcessingStatus.processing: {ProcessingStatus.completed, ProcessingStatus.failed},
    ProcessingStatus.completed: set(),
    ProcessingStatus.failed: set(),
}


def _check(current: str | None, target: ProcessingStatus, document_id: str) -> None:
    state = ProcessingStatus(current) if current else None
    if target not in _TRANSITIONS[state]:
        raise InvalidTransition(
            f"Document {document_id}: cannot move analysis from {state.value if state else 'none'} to {target.value}"
        )


def get_analysis(db: Session, document_id: str) -> DocumentAnalysis | None:
    return db.query(DocumentAnalysis).filter(DocumentAnalysis.document_id == document_id).one_or_none()


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to {what}: {e}") from e


def start(db: Session, document_id: str) -> DocumentAnalysis:
    _check(getattr(get_analysis(db, document_id), "processing_status", None), ProcessingStatus.processing, document_id)
    analysis = DocumentAnalysis(document_id=document_id, processing_status=ProcessingStatus.processing.value)
    db.add(analysis)
    _commit(db, "create analysis record")
    logger.info("Document %s: processing", document_id)
    return analysis


def complete(db: Session, analysis: DocumentAnalysis, text: str, ocr_confidence: int) -> DocumentAnalysis:
    _check(analysis.processing_status, ProcessingStatus.completed, analysis.document_id)
    analysis.extracted_text = text
    analysis.ocr_confidence = ocr_confidence
    analysis.processing_status = ProcessingStatus.completed.value
    analysis.error_message = None
    _commit(db, "update analysis record")
    logger.info("Document %s: completed (ocr confidence %d)", analysis.document_id, ocr_confidence)
    return analysis


def fail(db: Session, document_id: str, message: str) -> DocumentAnalysis | None:
    """Mark the analysis failed. Returns None if no analysis row exists yet."""
    analysis = get_analysis(db, document_id)
    if analysis is None:
        return None
    _check(analysis.processing_status, ProcessingStatus.failed, document_id)
    analysis.processing_status = ProcessingStatus.failed.value
    analysis.error_message = message or "Unknown error"
    _commit(db, "update analysis record")
    logger.info("Document %s: failed (%s)", document_id, analysis.error_message)
    return analysis


def record_insights(db: Session, analysis: DocumentAnalysis, data: DocumentInsightsData) -> DocumentInsights:
    if analysis.processing_status != ProcessingStatus.completed.value:
        raise InvalidTransition(
            f"Document {analysis.document_id}: insights require a completed analysis, "
            f"found {analysis.processing_status}"
        )
    existing = db.query(DocumentInsights).filter(DocumentInsights.document_id == analysis.document_id).first()
    if existing is not None:
        raise InvalidTransition(f"Document {analysis.document_id}: insights already recorded")

    insights = DocumentInsights(document_id=analysis.document_id, **data.model_dump(mode="json"))
    db.add(insights)
    _commit(db, "store insights")
    return insights
