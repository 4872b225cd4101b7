from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import db_dep, require_api_key, user_dep
from ..schemas.analytics import DashboardStats
from ..services.analytics import summarize
from ..services.documents import get_documents

router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(require_api_key)])

@router.get("", response_model=DashboardStats)
def dashboard(user_id: str = Depends(user_dep), db: Session = Depends(db_dep)) -> DashboardStats:
    return summarize(get_documents(db, user_id))
