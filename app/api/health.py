from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    # store ping; a failure surfaces as the generic 500
    db.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "service": "checkin-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
