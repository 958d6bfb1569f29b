from datetime import datetime

from fastapi import APIRouter

router = APIRouter(tags=["System"])

@router.get("/healthz")
async def healthz():
    """Liveness probe"""
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}
