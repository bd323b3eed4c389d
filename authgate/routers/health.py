from fastapi import APIRouter
from sqlalchemy import text

from authgate.database import session_scope

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    with session_scope() as session:
        session.execute(text("SELECT 1"))
    return {"status": "ok"}
