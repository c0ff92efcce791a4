"""
OAuth2 token and application types consumed by scope validators.
"""

from .types import AuthenticatedUser, AccessToken, OAuthApplication

__all__ = [
    'AuthenticatedUser',
    'AccessToken',
    'OAuthApplication',
]
