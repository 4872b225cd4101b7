from typing import Optional
from sqlalchemy import String, Integer, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import uuid
from .db import Base

def _id(prefix="id"): return f"{prefix}_{uuid.uuid4().hex[:10]}"

class Document(Base):
    __tablename__ = "documents"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: _id("doc"))
    user_id: Mapped[str] = mapped_column(String, index=True)
    filename: Mapped[str] = mapped_column(String)
    file_size: Mapped[int] = mapped_column(Integer)
    file_type: Mapped[str] = mapped_column(String)
    storage_path: Mapped[str] = mapped_column(String)
    upload_status: Mapped[str] = mapped_column(String, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    analysis: Mapped[Optional["DocumentAnalysis"]] = relationship(
        back_populates="document", uselist=False, cascade="all, delete-orphan")
    insights: Mapped[Optional["DocumentInsights"]] = relationship(
        back_populates="document", uselist=False, cascade="all, delete-orphan")

class DocumentAnalysis(Base):
    __tablename__ = "document_analysis"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: _id("an"))
    document_id: Mapped[str] = mapped_column(String, ForeignKey("documents.id", ondelete="CASCADE"), unique=True)
    extracted_text: Mapped[str | None] = mapped_column(Text, default=None)
    ocr_confidence: Mapped[int | None] = mapped_column(Integer, default=None)
    processing_status: Mapped[str] = mapped_column(String, default="processing")
    error_message: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    document: Mapped[Document] = relationship(back_populates="analysis")

class DocumentInsights(Base):
    __tablename__ = "document_insights"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: _id("in"))
    document_id: Mapped[str] = mapped_column(String, ForeignKey("documents.id", ondelete="CASCADE"), unique=True)
    summary: Mapped[str | None] = mapped_column(Text, default=None)
    key_fields: Mapped[dict] = mapped_column(JSON, default=dict)
    named_entities: Mapped[list] = mapped_column(JSON, default=list)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    topics: Mapped[list] = mapped_column(JSON, default=list)
    risks: Mapped[list] = mapped_column(JSON, default=list)
    action_items: Mapped[list] = mapped_column(JSON, default=list)
    compliance_suggestions: Mapped[list] = mapped_column(JSON, default=list)
    confidence_scores: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    document: Mapped[Document] = relationship(back_populates="insights")
