"""
Core OAuth2 types for scope validation: the authorized user, the access
token being validated, and the client application that owns it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any


PRIMARY_USER_STORE = "PRIMARY"
SUPER_TENANT_DOMAIN = "carbon.super"


@dataclass(frozen=True)
class AuthenticatedUser:
    """User the access token was issued to."""
    user_name: str
    user_store_domain: str = PRIMARY_USER_STORE
    tenant_domain: str = SUPER_TENANT_DOMAIN

    def __str__(self) -> str:
        return f"{self.user_store_domain}/{self.user_name}@{self.tenant_domain}"


@dataclass
class AccessToken:
    """Access token presented for a protected resource."""
    consumer_key: str
    authz_user: Optional[AuthenticatedUser] = None
    scopes: List[str] = field(default_factory=list)
    token_id: Optional[str] = None
    issued_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def has_subject(self) -> bool:
        """Whether the token resolves to an authorized user."""
        return self.authz_user is not None


@dataclass
class OAuthApplication:
    """OAuth client application (service provider) registered for a client id."""
    application_name: str
    client_id: str
    tenant_domain: str = SUPER_TENANT_DOMAIN
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        """Application name qualified with its owning tenant."""
        return f"{self.application_name}@{self.tenant_domain}"
