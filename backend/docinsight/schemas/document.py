from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import ProcessingStatus, UploadStatus
from .insights import (
    ActionItem,
    ComplianceSuggestion,
    ConfidenceScores,
    KeyFields,
    Keyword,
    NamedEntity,
    Risk,
    Topic,
)

class AnalysisOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    extracted_text: str | None = None
    ocr_confidence: int | None = Field(default=None, ge=0, le=95)
    processing_status: ProcessingStatus
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime

class InsightsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    summary: str | None = None
    key_fields: KeyFields = {}
    named_entities: List[NamedEntity] = []
    keywords: List[Keyword] = []
    topics: List[Topic] = []
    risks: List[Risk] = []
    action_items: List[ActionItem] = []
    compliance_suggestions: List[ComplianceSuggestion] = []
    confidence_scores: Optional[ConfidenceScores] = None
    created_at: datetime

class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    filename: str
    file_size: int
    file_type: str
    storage_path: str
    upload_status: UploadStatus
    created_at: datetime
    updated_at: datetime
    analysis: AnalysisOut | None = None
    insights: InsightsOut | None = None
