from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hdnotes.platform.db.session import get_db, ping
from hdnotes.platform.logger import get_logger
from hdnotes.platform.timeutils import utcnow

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    timestamp = utcnow().isoformat() + "Z"
    try:
        await ping(db)
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "Server error", "timestamp": timestamp, "database": "Disconnected"},
        )

    return {"status": "Server is running", "timestamp": timestamp, "database": "Connected"}
