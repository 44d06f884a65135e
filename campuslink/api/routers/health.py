# campuslink/api/routers/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campuslink.data.database import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"service": "campuslink", "status": "healthy"}
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=503,
            content={"service": "campuslink", "status": "unhealthy", "error": str(e)},
        )
