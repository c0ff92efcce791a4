"""
Builds the XACML attribute set for a token validation request.
"""

from ..auth.types import AccessToken, OAuthApplication
from .types import (
    AuthorizationRequest,
    ACTION_CATEGORY, SP_CATEGORY, USER_CATEGORY, SCOPE_CATEGORY, RESOURCE_CATEGORY,
    AUTH_ACTION_ID, SP_NAME_ID, USERNAME_ID, USER_STORE_ID, USER_TENANT_DOMAIN_ID,
    RESOURCE_ID, SCOPE_ID, ACTION_VALIDATE,
)


class RequestBuilder:
    """
    Assembles the authorization request for a (token, application, resource)
    triple.

    The request always carries the action, application name, username,
    user-store domain, tenant domain and resource, followed by one scope
    attribute per scope on the token in the token's order.
    """

    def __init__(self, action: str = ACTION_VALIDATE):
        self.action = action

    def build(self, token: AccessToken, application: OAuthApplication,
              resource: str) -> AuthorizationRequest:
        """
        Build the request. The token must carry an authorized user.

        Args:
            token: Access token being validated
            application: Application the token was issued to
            resource: Resource the client is trying to access

        Returns:
            AuthorizationRequest: Attributes in submission order
        """
        user = token.authz_user
        request = AuthorizationRequest()
        request.add(self.action, AUTH_ACTION_ID, ACTION_CATEGORY)
        request.add(application.application_name, SP_NAME_ID, SP_CATEGORY)
        request.add(user.user_name, USERNAME_ID, USER_CATEGORY)
        request.add(user.user_store_domain, USER_STORE_ID, USER_CATEGORY)
        request.add(user.tenant_domain, USER_TENANT_DOMAIN_ID, USER_CATEGORY)
        request.add(resource, RESOURCE_ID, RESOURCE_CATEGORY)

        for scope in token.scopes:
            request.add(scope, SCOPE_ID, SCOPE_CATEGORY)

        return request
