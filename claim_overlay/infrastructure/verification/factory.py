"""Factory for creating and managing verification providers."""

from typing import Any, Callable, Dict, Optional

from ...domain.ports.verification_provider import VerificationProvider
from .api_adapter import ApiVerificationAdapter
from .mock_adapter import MockVerificationAdapter

ProviderBuilder = Callable[..., VerificationProvider]


class VerificationProviderFactory:
    """Factory for creating and managing verification providers."""

    def __init__(self):
        """Initialize the factory."""
        self._providers: Dict[str, ProviderBuilder] = {}
        self._instances: Dict[str, VerificationProvider] = {}

        # Register default providers
        self.register_provider("api", ApiVerificationAdapter)
        self.register_provider("mock", MockVerificationAdapter)

    def register_provider(self, name: str, provider_class: ProviderBuilder) -> None:
        """Register a new verification provider.

        Args:
            name: Provider name
            provider_class: Provider class or builder
        """
        self._providers[name] = provider_class

    async def create_provider(self, name: str, **kwargs: Any) -> VerificationProvider:
        """Create and initialize a provider instance.

        Args:
            name: Provider name
            **kwargs: Provider-specific configuration

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider not found
        """
        if name not in self._providers:
            raise ValueError(f"Provider '{name}' not found")

        if name not in self._instances:
            provider = self._providers[name](**kwargs)
            await provider.initialize()
            self._instances[name] = provider

        return self._instances[name]

    def get_provider(self, name: str) -> Optional[VerificationProvider]:
        return self._instances.get(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Registered providers and whether an instance exists."""
        return {name: name in self._instances for name in self._providers}

    async def shutdown(self) -> None:
        """Shutdown all provider instances."""
        for provider in self._instances.values():
            await provider.shutdown()
        self._instances.clear()
