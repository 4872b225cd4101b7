from __future__ import annotations

from typing import Iterable, List

from ..models import Document
from ..schemas.analytics import ConfidencePoint, DashboardStats
from ..schemas.common import Priority, Severity
from ..schemas.insights import ActionItem, Risk

SEVERITY_ORDER = [Severity.critical, Severity.high, Severity.medium, Severity.low]
PRIORITY_ORDER = [Priority.high, Priority.medium, Priority.low]


def summarize(documents: Iterable[Document]) -> DashboardStats:
    docs = list(documents)
    with_insights = [d for d in docs if d.insights is not None]
    analyzed = [d for d in with_insights if d.analysis is not None]

    all_risks: List[Risk] = []
    all_actions: List[ActionItem] = []
    for d in with_insights:
        all_risks += [Risk.model_validate(r) for r in d.insights.risks or []]
        all_actions += [ActionItem.model_validate(a) for a in d.insights.action_items or []]

    risks_by_severity = {s.value: sum(1 for r in all_risks if r.severity == s) for s in SEVERITY_ORDER}
    actions_by_priority = {p.value: sum(1 for a in all_actions if a.priority == p) for p in PRIORITY_ORDER}

    total_overall = sum(_score(d, "overall") for d in with_insights)
    average = total_overall / (len(with_insights) or 1)

    series = [
        ConfidencePoint(
            name=f"Doc {i}",
            overall=round(_score(d, "overall") * 100),
            extraction=round(_score(d, "extraction") * 100),
            analysis=round(_score(d, "analysis") * 100),
            insights=round(_score(d, "insights") * 100),
        )
        for i, d in enumerate(with_insights, start=1)
    ]

    return DashboardStats(
        total_documents=len(docs),
        analyzed_documents=len(analyzed),
        all_risks=all_risks,
        all_action_items=all_actions,
        risks_by_severity=risks_by_severity,
        actions_by_priority=actions_by_priority,
        average_confidence=average,
        confidence_series=series,
    )


def _score(doc: Document, key: str) -> float:
    scores = doc.insights.confidence_scores or {}
    return float(scores.get(key) or 0.0)
