from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from . import config
from .db import get_db
from .services.storage import BlobStore, get_store

def db_dep(db: Session = Depends(get_db)):
    return db

def store_dep() -> BlobStore:
    return get_store()

# Optional API key gate
def require_api_key(x_api_key: str = Header(None)):
    if config.API_KEY and x_api_key != config.API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")

def user_dep(x_user_id: str = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=400, detail="X-User-Id header is required")
    return x_user_id
