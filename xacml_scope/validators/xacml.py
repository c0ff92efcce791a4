"""
Scope validator that delegates the decision to a XACML policy decision point.
"""

import logging
from datetime import timedelta
from typing import Optional

from ..audit.logger import AuditLogger
from ..audit.types import AuditEvent, SCOPE_VALIDATION, POLICY_NOT_APPLICABLE
from ..auth.types import AccessToken, OAuthApplication
from ..authz.builder import RequestBuilder
from ..authz.codec import XACMLCodec
from ..authz.resolver import DecisionResolver
from ..authz.types import Decision
from ..integration.clients import ApplicationStore, ValidationConfig, DecisionOracle
from ..integration.context import TenantContext, tenant_flow
from ..metrics.collector import ValidationMetrics
from ..resilience.patterns import Retry, RetryConfig, Timeout, TimeoutConfig
from ..types.errors import ScopeValidationError, InvalidTokenError, ErrorCode
from .base import ScopeValidator, register_validator

logger = logging.getLogger(__name__)


@register_validator
class XACMLScopeValidator(ScopeValidator):
    """
    Validates token scopes against XACML policies.

    Validation only runs for applications that opted in; for the rest every
    token is allowed and enforcement is left to other layers. For opted-in
    applications the token, application and resource are sent to the PDP as
    a XACML request and the decision is resolved to allow or deny.

    validate never raises. Anything that prevents a decision is logged and
    treated as a deny.
    """

    name = "XACML Scope Validator"

    def __init__(
        self,
        application_store: ApplicationStore,
        validation_config: ValidationConfig,
        tenant_context: TenantContext,
        decision_oracle: DecisionOracle,
        builder: Optional[RequestBuilder] = None,
        codec: Optional[XACMLCodec] = None,
        resolver: Optional[DecisionResolver] = None,
        oracle_timeout: timedelta = timedelta(seconds=10),
        retry: Optional[RetryConfig] = None,
        audit_logger: Optional[AuditLogger] = None,
        metrics: Optional[ValidationMetrics] = None
    ):
        self.application_store = application_store
        self.validation_config = validation_config
        self.tenant_context = tenant_context
        self.decision_oracle = decision_oracle
        self.builder = builder or RequestBuilder()
        self.codec = codec or XACMLCodec()
        self.resolver = resolver or DecisionResolver()
        self.timeout = Timeout(TimeoutConfig(timeout=oracle_timeout))
        self.retry = Retry(retry or RetryConfig())
        self.audit_logger = audit_logger
        self.metrics = metrics

    async def validate(self, token: AccessToken, resource: str) -> bool:
        try:
            return await self._validate(token, resource)
        except Exception as e:
            logger.error(f"Unexpected error during XACML scope validation: {e}", exc_info=True)
            self._record_error(ErrorCode.INTERNAL_ERROR.value)
            return False

    async def close(self) -> None:
        await self.decision_oracle.close()

    async def _validate(self, token: AccessToken, resource: str) -> bool:
        if token is None or not token.has_subject:
            error = InvalidTokenError()
            logger.debug(f"Invalid access token: {error}")
            self._record_error(error.error_code.value)
            await self._audit(token, resource, "invalid_token", error=error.error_code.value)
            return False

        logger.debug("In policy scope validation flow...")

        try:
            application = await self.application_store.get_application(token.consumer_key)
            tenant_domain = application.tenant_domain
            enabled = await self.validation_config.is_validation_enabled(
                application.application_name, token.consumer_key, tenant_domain
            )
        except ScopeValidationError as e:
            logger.error(f"Could not resolve OAuth application for '{token.consumer_key}': {e}",
                         exc_info=True)
            self._record_error(e.error_code.value)
            await self._audit(token, resource, "error", error=e.error_code.value)
            return False

        if not enabled:
            logger.debug(f"Scope validation is disabled for '{application.qualified_name}'")
            await self._audit(token, resource, "disabled", application=application)
            return True

        return await self._validate_with_pdp(token, application, resource)

    async def _validate_with_pdp(self, token: AccessToken, application: OAuthApplication,
                                 resource: str) -> bool:
        try:
            request = self.builder.build(token, application, resource)
            request_document = self.codec.encode(request)
            logger.debug(f"XACML scope validation request :\n{request_document}")

            with tenant_flow(self.tenant_context, token.authz_user.tenant_domain):
                response_document = await self._get_decision(request_document)

            logger.debug(f"XACML scope validation response :\n{response_document}")
            decision = self.codec.decode(response_document)
        except ScopeValidationError as e:
            logger.error(f"XACML scope validation failed for '{application.qualified_name}': {e}",
                         exc_info=True)
            self._record_error(e.error_code.value)
            await self._audit(token, resource, "error", application=application,
                              error=e.error_code.value)
            return False

        if self.metrics:
            self.metrics.record_decision(decision.value)

        allowed = self.resolver.resolve(decision, application.application_name,
                                        application.tenant_domain)

        if decision is Decision.NOT_APPLICABLE:
            await self._audit(token, resource, "allowed", application=application,
                              decision=decision, event_type=POLICY_NOT_APPLICABLE)
        await self._audit(token, resource, "allowed" if allowed else "denied",
                          application=application, decision=decision)
        return allowed

    async def _get_decision(self, request_document: str) -> str:
        async def attempt() -> str:
            return await self.timeout.execute(self.decision_oracle.get_decision, request_document)

        if self.metrics:
            with self.metrics.time_oracle():
                return await self.retry.execute(attempt)
        return await self.retry.execute(attempt)

    def _record_error(self, error: str) -> None:
        if self.metrics:
            self.metrics.record_error(error)

    async def _audit(
        self,
        token: Optional[AccessToken],
        resource: str,
        outcome: str,
        application: Optional[OAuthApplication] = None,
        decision: Optional[Decision] = None,
        error: Optional[str] = None,
        event_type: str = SCOPE_VALIDATION
    ) -> None:
        if self.metrics and event_type == SCOPE_VALIDATION:
            self.metrics.record_outcome(outcome)

        if self.audit_logger is None:
            return

        details = {'outcome': outcome, 'validator': self.name}
        if application is not None:
            details['application'] = application.qualified_name
        if decision is not None:
            details['decision'] = decision.value
        if error is not None:
            details['error'] = error

        user = token.authz_user if token is not None else None
        event = AuditEvent(
            event_type=event_type,
            client_id=token.consumer_key if token is not None else "",
            details=details,
            principal=str(user) if user else None,
            resource=resource
        )
        try:
            await self.audit_logger.log(event)
        except Exception as e:
            logger.error(f"Failed to write audit event: {e}")
