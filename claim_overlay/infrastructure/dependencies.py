"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from ..domain.models.settings import ExtensionSettings
from ..domain.ports.scheduler import Scheduler
from ..domain.ports.verification_provider import VerificationProvider
from ..domain.services.page_session import PageSession
from ..domain.services.worthiness_scorer import WorthinessScorer
from .host.soup_page import SoupHostPage
from .notifications.badge_sink import BadgeNotificationSink
from .settings.env_settings import AppConfig, load_config
from .verification.factory import VerificationProviderFactory

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(self, config: Optional[AppConfig] = None):
        """Initialize service container."""
        self.config = config or load_config()
        self._factory = VerificationProviderFactory()
        self._services: Dict[str, Any] = {}
        self._setup_services()

    def _setup_services(self) -> None:
        logger.info("🔧 Setting up service container...")
        self._services = {
            "scorer": WorthinessScorer(mode=self.config.extension.highlight_aggressiveness),
            "factory": self._factory,
        }
        logger.info("✅ Service container setup completed")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_scorer(self) -> WorthinessScorer:
        return self.get("scorer")

    async def get_verification_provider(self) -> VerificationProvider:
        """Create the configured provider on first use."""
        name = self.config.provider
        provider = self._factory.get_provider(name)
        if provider is None:
            logger.info(f"🔨 Creating verification provider '{name}'...")
            kwargs = {"config": self.config.api} if name == "api" else {}
            provider = await self._factory.create_provider(name, **kwargs)
            logger.info("✅ Verification provider ready")
        return provider

    async def create_session(
        self,
        host: SoupHostPage,
        scheduler: Scheduler,
        settings: Optional[ExtensionSettings] = None,
    ) -> PageSession:
        """Build a page session wired to the configured provider."""
        provider = await self.get_verification_provider()
        return PageSession(
            host,
            provider,
            scheduler,
            settings=settings or self.config.extension,
            sink=BadgeNotificationSink(),
            timing=self.config.timing,
        )

    async def shutdown(self) -> None:
        await self._factory.shutdown()


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_scorer() -> WorthinessScorer:
    """FastAPI dependency for the worthiness scorer."""
    return get_service_container().get_scorer()


async def get_verification_provider() -> VerificationProvider:
    """FastAPI dependency for the verification provider."""
    return await get_service_container().get_verification_provider()
