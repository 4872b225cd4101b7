import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from . import config
from .db import engine, Base
from .routes import documents as r_documents, analytics as r_analytics

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="DocInsight API", version="0.1.0")

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Auto-create tables for dev (use Alembic later)
Base.metadata.create_all(bind=engine)

app.include_router(r_documents.router)
app.include_router(r_analytics.router)

@app.get("/")
def health():
    return {"ok": True}
