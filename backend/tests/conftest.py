from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="docinsight-tests-"))

# must be in place before anything imports docinsight.config
os.environ["DATABASE_URL"] = f"sqlite:///{(_TMP / 'test.db').as_posix()}"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_LOCAL_ROOT"] = str(_TMP / "storage")
os.environ["PIPELINE_MODE"] = "sync"
os.environ["LLM_PROVIDER"] = "gemini"
os.environ["API_KEY"] = ""
for _key in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "OLLAMA_BASE"):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docinsight.db import Base, get_db
from docinsight.errors import StorageError
from docinsight.models import Document


class FakeBlobStore:
    """In-memory blob store that records every call."""

    def __init__(self, fail_put: bool = False, fail_delete: bool = False):
        self.blobs: dict[str, bytes] = {}
        self.puts: list[str] = []
        self.deletes: list[str] = []
        self.fail_put = fail_put
        self.fail_delete = fail_delete

    def put(self, path, data, content_type="application/octet-stream"):
        self.puts.append(path)
        if self.fail_put:
            raise StorageError("Upload failed: bucket unavailable")
        self.blobs[path] = data
        return path

    def get(self, locator):
        try:
            return self.blobs[locator]
        except KeyError:
            raise StorageError(f"Failed to fetch {locator}: missing")

    def delete(self, locator):
        self.deletes.append(locator)
        if self.fail_delete:
            raise StorageError(f"Failed to delete {locator}: bucket unavailable")
        self.blobs.pop(locator, None)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store():
    return FakeBlobStore()


@pytest.fixture
def store_factory():
    return FakeBlobStore


@pytest.fixture
def make_document(db):
    def _make(user_id="user-1", filename="notes.txt", file_type="text/plain", storage_path=None, **kw):
        doc = Document(
            user_id=user_id,
            filename=filename,
            file_size=kw.pop("file_size", 10),
            file_type=file_type,
            storage_path=storage_path or f"{user_id}/{filename}",
            upload_status="completed",
            **kw,
        )
        db.add(doc)
        db.commit()
        return doc

    return _make


@pytest.fixture
def client(session_factory, store):
    from docinsight.deps import store_dep
    from docinsight.main import app

    def _db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[store_dep] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
