from fastapi import APIRouter, Depends

from ryogae.core.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and configuration status")
async def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "version": settings.version,
        "provider": settings.exchange_rate_provider,
        "credential_configured": settings.credential_configured,
    }
