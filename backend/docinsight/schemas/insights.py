"""Insight value types shared by the synthesizer, the ORM JSON columns and the API."""
from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from .common import Priority, Severity

KeyFields = Dict[str, Union[str, int, float, bool]]


def _clamp_unit(v: Any) -> float:
    if v is None:
        return 0.0
    try:
        v = float(v)
    except (TypeError, ValueError):
        raise ValueError(f"not a number: {v!r}")
    return min(max(v, 0.0), 1.0)


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


UnitScore = Annotated[float, BeforeValidator(_clamp_unit), Field(ge=0, le=1)]
SeverityLevel = Annotated[Severity, BeforeValidator(_lower)]
PriorityLevel = Annotated[Priority, BeforeValidator(_lower)]


class NamedEntity(BaseModel):
    text: str
    type: str
    confidence: UnitScore = 0.0


class Keyword(BaseModel):
    text: str
    relevance: UnitScore = 0.0


class Topic(BaseModel):
    name: str
    confidence: UnitScore = 0.0


class Risk(BaseModel):
    description: str
    severity: SeverityLevel
    category: str = ""
    confidence: UnitScore = 0.0


class ActionItem(BaseModel):
    description: str
    priority: PriorityLevel
    deadline: Optional[str] = None
    assignee: Optional[str] = None


class ComplianceSuggestion(BaseModel):
    description: str
    regulation: str = ""
    priority: PriorityLevel


class ConfidenceScores(BaseModel):
    overall: float = Field(ge=0, le=1)
    extraction: float = Field(ge=0, le=1)
    analysis: float = Field(ge=0, le=1)
    insights: float = Field(ge=0, le=1)


class ModelInsights(BaseModel):
    """Typed decode of the JSON object a model returns.

    Every field is optional on the wire; absent fields take the same defaults
    the pipeline has always applied ("No summary available", empty lists,
    empty mapping). Confidence scores are never read from the model.
    """

    summary: str = "No summary available"
    key_fields: KeyFields = Field(default_factory=dict)
    named_entities: List[NamedEntity] = Field(default_factory=list)
    keywords: List[Keyword] = Field(default_factory=list)
    topics: List[Topic] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    compliance_suggestions: List[ComplianceSuggestion] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def default_summary(cls, v: Any) -> Any:
        return v or "No summary available"

    @field_validator(
        "key_fields", "named_entities", "keywords", "topics", "risks",
        "action_items", "compliance_suggestions", mode="before",
    )
    @classmethod
    def default_collections(cls, v: Any, info) -> Any:
        if v is None:
            return {} if info.field_name == "key_fields" else []
        if info.field_name == "key_fields" and isinstance(v, dict):
            # nested values are flattened to their JSON text
            return {
                str(k): val if isinstance(val, (str, int, float, bool)) else json.dumps(val)
                for k, val in v.items()
            }
        return v


class DocumentInsightsData(ModelInsights):
    """A complete insight record, as produced by either synthesizer."""

    confidence_scores: ConfidenceScores
