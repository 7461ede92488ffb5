"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_service_container)) -> Dict[str, Any]:
    """Check the health of the service and its verification provider.

    Returns:
        Service status, configured provider and provider availability
    """
    provider = await container.get_verification_provider()
    provider_health = await provider.health()
    return {
        "status": "healthy",
        "version": VERSION,
        "provider": provider.provider_name,
        "providers": container.get("factory").available_providers,
        "provider_health": provider_health.model_dump(),
    }
