from fastapi import APIRouter

from config import settings
from models import PingResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/ping", response_model=PingResponse)
async def ping():
    return PingResponse(message=settings.PING_MESSAGE)
