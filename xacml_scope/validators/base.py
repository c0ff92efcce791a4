"""
Scope validator interface and registry.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Type

from ..auth.types import AccessToken
from ..types.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ScopeValidator(ABC):
    """
    Decides whether an access token's scopes permit access to a resource.
    """

    name: str = ""

    @abstractmethod
    async def validate(self, token: AccessToken, resource: str) -> bool:
        """
        Validate the token's scopes for a resource.

        Args:
            token: Access token presented by the client
            resource: Resource the client is trying to access

        Returns:
            bool: True if access is allowed
        """
        pass

    def can_handle(self) -> bool:
        """Whether this validator can run in the current deployment."""
        return True

    async def close(self) -> None:
        """Release resources held by the validator."""
        pass


ValidatorFactory = Callable[..., ScopeValidator]


class ScopeValidatorRegistry:
    """Maps validator names to factories so validators are chosen by configuration."""

    def __init__(self):
        self._factories: Dict[str, ValidatorFactory] = {}

    def register(self, name: str, factory: ValidatorFactory) -> None:
        """Register a validator factory under a name."""
        if name in self._factories:
            logger.warning(f"Replacing scope validator registered as '{name}'")
        self._factories[name] = factory

    def unregister(self, name: str) -> bool:
        """Remove a registered validator."""
        return self._factories.pop(name, None) is not None

    def create(self, name: str, **kwargs: Any) -> ScopeValidator:
        """
        Create the validator registered under name.

        Raises:
            ConfigurationError: If no validator is registered under name
        """
        factory = self._factories.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown scope validator: {name}",
                config_key="validator",
                config_value=name
            )
        return factory(**kwargs)

    def names(self) -> List[str]:
        """Names of all registered validators."""
        return list(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


default_registry = ScopeValidatorRegistry()


def register_validator(cls: Type[ScopeValidator]) -> Type[ScopeValidator]:
    """Class decorator registering a validator in the default registry under its name."""
    default_registry.register(cls.name, cls)
    return cls
