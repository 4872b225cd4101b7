# backend/docinsight/services/pipeline.py
from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO, Union

from celery import shared_task
from sqlalchemy.orm import Session

from ..db import SessionLocal
from ..errors import DocInsightError, DocumentNotFound, InvalidTransition
from ..models import Document, DocumentAnalysis
from . import tracker
from .ocr import confidence_score, extract_text
from .storage import BlobStore, get_store
from .synthesizer import Synthesizer, get_synthesizer

logger = logging.getLogger(__name__)

async def process_document(
    db: Session,
    document_id: str,
    data: Union[bytes, BinaryIO],
    content_type: str | None,
    synthesizer: Synthesizer | None = None,
) -> DocumentAnalysis:
    """
    Run one document through the pipeline, strictly in order:
      1) analysis row created in `processing`
      2) text extracted from the upload
      3) OCR confidence scored
      4) analysis marked `completed`
      5) insights synthesized (model or mock; never raises)
      6) insights row written
    Any failure in 1-4 marks the analysis `failed` and re-raises.
    A failure in 6 propagates but leaves the completed analysis as it is.
    """
    analysis = None
    try:
        analysis = tracker.start(db, document_id)
        text = extract_text(data, content_type)
        analysis = tracker.complete(db, analysis, text, confidence_score(text))
    except InvalidTransition:
        raise
    except Exception as e:
        # a row we did not create belongs to another run
        if analysis is not None:
            tracker.fail(db, document_id, str(e) or type(e).__name__)
        raise

    synthesizer = synthesizer or get_synthesizer()
    insights = await synthesizer.analyze(text)
    tracker.record_insights(db, analysis, insights)
    logger.info("Document %s: insights stored (overall confidence %.2f)",
                document_id, insights.confidence_scores.overall)
    return analysis

async def process_stored_document(
    db: Session,
    document_id: str,
    store: BlobStore | None = None,
    synthesizer: Synthesizer | None = None,
) -> DocumentAnalysis:
    """Re-read the uploaded blob and process it."""
    doc = db.get(Document, document_id)
    if doc is None:
        raise DocumentNotFound(f"Document {document_id} not found")
    store = store or get_store()
    data = store.get(doc.storage_path)
    return await process_document(db, document_id, data, doc.file_type, synthesizer)

@shared_task(name="docinsight.services.pipeline.task_process")
def task_process(document_id: str):
    db: Session = SessionLocal()
    try:
        analysis = asyncio.run(process_stored_document(db, document_id))
        return {"document_id": document_id, "processing_status": analysis.processing_status}
    except DocInsightError as e:
        # already recorded on the analysis row; no retry
        logger.error("Document %s: processing failed: %s", document_id, e)
        return {"document_id": document_id, "processing_status": "failed", "error": str(e)}
    finally:
        db.close()

def enqueue_processing(document_id: str):
    from ..workers.celery_app import celery
    return celery.send_task(task_process.name, args=[document_id])
