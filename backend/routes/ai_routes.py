from fastapi import APIRouter, Depends

from config import APP_VERSION
from services.ai_service import AIService, get_ai_service

router = APIRouter(prefix="/api", tags=["AI"])


@router.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}


@router.get("/ai-info")
async def ai_info(ai_service: AIService = Depends(get_ai_service)):
    """Which model backs summaries and flashcards."""
    return ai_service.info()


@router.get("/ai-status")
async def ai_status(ai_service: AIService = Depends(get_ai_service)):
    """Provider reachability, re-checked at most every few minutes."""
    info = ai_service.info()
    return {
        "running": await ai_service.check_availability(),
        "model": info["model"],
        "provider": info["provider"],
        "modelInfo": info["modelInfo"],
        "needsLocalSetup": False,
    }
