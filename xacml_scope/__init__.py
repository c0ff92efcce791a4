"""
XACML Scope Validator

OAuth2 scope validation delegated to a XACML policy decision point.
"""

__version__ = "0.1.0"
__author__ = "Mauricio Fernandez"
__email__ = "mauricio.fernandez@siemens.com"

from .auth.types import AuthenticatedUser, AccessToken, OAuthApplication
from .authz.types import Decision, AuthorizationRequest, AuthorizationSubjectAttribute
from .core.config import ValidatorConfig
from .core.factory import build_validator
from .validators.base import ScopeValidator
from .validators.xacml import XACMLScopeValidator

__all__ = [
    "AuthenticatedUser",
    "AccessToken",
    "OAuthApplication",
    "Decision",
    "AuthorizationRequest",
    "AuthorizationSubjectAttribute",
    "ValidatorConfig",
    "build_validator",
    "ScopeValidator",
    "XACMLScopeValidator",
]
