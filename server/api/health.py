# server/api/health.py

import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from database import ping


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
def root():
    return {"message": "Blog App API is running!", "status": "success"}


@router.get("/api/health")
def health(request: Request):
    try:
        ping(request.app.state.engine)
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
    return {"status": "ok", "database": "connected"}
