from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from docinsight import config
from docinsight.errors import DocumentNotFound, UploadError
from docinsight.models import Document, DocumentAnalysis, DocumentInsights
from docinsight.services import documents as svc
from docinsight.services.pipeline import process_document


def _failing_session():
    session = MagicMock()
    session.commit.side_effect = OperationalError("INSERT INTO documents", {}, Exception("db is down"))
    return session


def test_upload_writes_blob_then_row(db, store):
    doc = svc.upload_document(db, store, b"hello world", "notes.txt", "text/plain", "user-1")

    assert doc.id.startswith("doc_")
    assert doc.upload_status == "completed"
    assert doc.file_size == 11
    assert doc.storage_path.startswith("user-1/") and doc.storage_path.endswith("_notes.txt")
    assert store.blobs[doc.storage_path] == b"hello world"
    assert db.get(Document, doc.id) is not None


def test_upload_strips_directories_from_filename(db, store):
    doc = svc.upload_document(db, store, b"x", "../../etc/passwd.txt", "text/plain", "user-1")
    assert doc.filename == "passwd.txt"
    assert ".." not in doc.storage_path


def test_failed_insert_deletes_the_blob(store):
    session = _failing_session()

    with pytest.raises(UploadError) as exc:
        svc.upload_document(session, store, b"hello", "notes.txt", "text/plain", "user-1")

    assert "Database insert failed" in str(exc.value)
    assert store.deletes == store.puts
    assert len(store.deletes) == 1
    assert store.blobs == {}
    session.rollback.assert_called_once()


def test_failed_compensation_is_swallowed(store_factory):
    store = store_factory(fail_delete=True)

    with pytest.raises(UploadError) as exc:
        svc.upload_document(_failing_session(), store, b"hello", "notes.txt", "text/plain", "user-1")

    assert "Database insert failed" in str(exc.value)
    assert store.deletes == store.puts


def test_blob_failure_aborts_before_insert(db, store_factory):
    store = store_factory(fail_put=True)
    with pytest.raises(UploadError) as exc:
        svc.upload_document(db, store, b"hello", "notes.txt", "text/plain", "user-1")
    assert exc.value.status_code == 502
    assert db.query(Document).count() == 0


@pytest.mark.parametrize(
    "content_type,accepted",
    [
        ("application/pdf", True),
        ("text/markdown", True),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", True),
        ("image/png", False),
        (None, False),
    ],
)
def test_upload_type_validation(content_type, accepted):
    if accepted:
        svc.validate_upload("f", content_type, 10)
    else:
        with pytest.raises(UploadError) as exc:
            svc.validate_upload("f", content_type, 10)
        assert exc.value.status_code == 400


def test_upload_size_limit(monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 1024)
    with pytest.raises(UploadError) as exc:
        svc.validate_upload("big.txt", "text/plain", 2048)
    assert exc.value.status_code == 413


def test_documents_listed_newest_first_per_user(db, make_document):
    now = datetime.utcnow()
    old = make_document(filename="old.txt", created_at=now - timedelta(days=2))
    new = make_document(filename="new.txt", created_at=now)
    make_document(user_id="someone-else", filename="other.txt")

    docs = svc.get_documents(db, "user-1")
    assert [d.id for d in docs] == [new.id, old.id]


@pytest.mark.asyncio
async def test_delete_removes_blob_and_dependent_rows(db, store):
    doc = svc.upload_document(db, store, b"Quarterly revenue report, final.", "q.txt", "text/plain", "user-1")
    await process_document(db, doc.id, b"Quarterly revenue report, final.", "text/plain")

    svc.delete_document(db, store, doc.id, doc.storage_path)

    assert doc.storage_path in store.deletes
    assert doc.storage_path not in store.blobs
    assert db.get(Document, doc.id) is None
    assert db.query(DocumentAnalysis).count() == 0
    assert db.query(DocumentInsights).count() == 0


def test_missing_documents_raise(db, store):
    with pytest.raises(DocumentNotFound):
        svc.get_document(db, "doc_missing")
    with pytest.raises(DocumentNotFound):
        svc.delete_document(db, store, "doc_missing")
