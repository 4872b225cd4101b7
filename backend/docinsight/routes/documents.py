# backend/docinsight/routes/documents.py
from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from .. import config
from ..deps import db_dep, store_dep, require_api_key, user_dep
from ..errors import DocumentNotFound, InvalidTransition, ReadError, StorageError, UploadError
from ..schemas.document import DocumentOut
from ..services import documents as svc
from ..services.pipeline import enqueue_processing, process_document, process_stored_document
from ..services.storage import BlobStore

router = APIRouter(prefix="/documents", tags=["documents"], dependencies=[Depends(require_api_key)])

def _load(db: Session, document_id: str, user_id: str):
    try:
        doc = svc.get_document(db, document_id)
    except DocumentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    if doc.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return doc

async def _read_upload(file: UploadFile) -> bytes:
    # reject on the declared size first; never buffer more than one byte past the limit
    svc.validate_upload(file.filename or "", file.content_type, file.size or 0)
    return await file.read(config.MAX_UPLOAD_BYTES + 1)

@router.post("", response_model=DocumentOut, status_code=201)
async def upload(
    file: UploadFile = File(...),
    user_id: str = Depends(user_dep),
    db: Session = Depends(db_dep),
    store: BlobStore = Depends(store_dep),
):
    # 1) Blob + row (compensated on insert failure)
    try:
        data = await _read_upload(file)
        doc = svc.upload_document(db, store, data, file.filename or "", file.content_type, user_id)
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    # 2) Process inline, or hand off to the worker
    if config.PIPELINE_MODE == "celery":
        enqueue_processing(doc.id)
    else:
        try:
            await process_document(db, doc.id, data, doc.file_type)
        except ReadError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except StorageError as e:
            raise HTTPException(status_code=502, detail=str(e))

    db.expire_all()
    return svc.get_document(db, doc.id)

@router.post("/{document_id}/process", response_model=DocumentOut)
async def process(
    document_id: str,
    user_id: str = Depends(user_dep),
    db: Session = Depends(db_dep),
    store: BlobStore = Depends(store_dep),
):
    _load(db, document_id, user_id)
    try:
        await process_stored_document(db, document_id, store)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ReadError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))

    db.expire_all()
    return svc.get_document(db, document_id)

@router.get("", response_model=list[DocumentOut])
def list_documents(user_id: str = Depends(user_dep), db: Session = Depends(db_dep)):
    return svc.get_documents(db, user_id)

@router.get("/{document_id}", response_model=DocumentOut)
def get_document(document_id: str, user_id: str = Depends(user_dep), db: Session = Depends(db_dep)):
    return _load(db, document_id, user_id)

@router.delete("/{document_id}", status_code=204)
def delete_document(
    document_id: str,
    user_id: str = Depends(user_dep),
    db: Session = Depends(db_dep),
    store: BlobStore = Depends(store_dep),
):
    doc = _load(db, document_id, user_id)
    try:
        svc.delete_document(db, store, document_id, doc.storage_path)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return Response(status_code=204)
