from typing import Dict, List

from pydantic import BaseModel

from .insights import ActionItem, Risk

class ConfidencePoint(BaseModel):
    name: str
    overall: int
    extraction: int
    analysis: int
    insights: int

class DashboardStats(BaseModel):
    total_documents: int
    analyzed_documents: int
    all_risks: List[Risk] = []
    all_action_items: List[ActionItem] = []
    risks_by_severity: Dict[str, int]
    actions_by_priority: Dict[str, int]
    average_confidence: float
    confidence_series: List[ConfidencePoint] = []
