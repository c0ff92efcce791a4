"""
Builds a configured scope validator.
"""

import logging
from typing import Optional

from ..audit.logger import AuditLogger, FileAuditLogger
from ..integration.clients import ApplicationStore, ValidationConfig, DecisionOracle, HttpDecisionOracle
from ..integration.context import TenantContext, ContextVarTenantContext
from ..metrics.collector import ValidationMetrics
from ..resilience.patterns import RetryConfig
from ..types.errors import ConfigurationError
from ..validators.base import ScopeValidator, ScopeValidatorRegistry, default_registry
from .config import ValidatorConfig

logger = logging.getLogger(__name__)


def build_validator(
    config: ValidatorConfig,
    application_store: ApplicationStore,
    validation_config: ValidationConfig,
    tenant_context: Optional[TenantContext] = None,
    decision_oracle: Optional[DecisionOracle] = None,
    audit_logger: Optional[AuditLogger] = None,
    metrics: Optional[ValidationMetrics] = None,
    registry: ScopeValidatorRegistry = default_registry
) -> ScopeValidator:
    """
    Create the validator named by config.validator with its collaborators.

    Without an explicit decision oracle an HTTP oracle is created for
    config.pdp_endpoint. Without an explicit audit logger a file audit logger
    is used when config.audit_log_path is set.

    Raises:
        ConfigurationError: If the configuration is invalid or incomplete
    """
    config.validate()
    logging.getLogger("xacml_scope").setLevel(config.log_level.upper())

    tenant_context = tenant_context or ContextVarTenantContext()

    if decision_oracle is None:
        if not config.pdp_endpoint:
            raise ConfigurationError("pdp_endpoint is required when no decision oracle is given",
                                     config_key="pdp_endpoint")
        decision_oracle = HttpDecisionOracle(
            config.pdp_endpoint,
            username=config.pdp_username,
            password=config.pdp_password,
            timeout=config.oracle_timeout.total_seconds(),
            tenant_context=tenant_context
        )

    if audit_logger is None and config.audit_log_path:
        audit_logger = FileAuditLogger(config.audit_log_path)

    validator = registry.create(
        config.validator,
        application_store=application_store,
        validation_config=validation_config,
        tenant_context=tenant_context,
        decision_oracle=decision_oracle,
        oracle_timeout=config.oracle_timeout,
        retry=RetryConfig(max_attempts=config.retry_attempts,
                          initial_delay=config.retry_initial_delay),
        audit_logger=audit_logger,
        metrics=metrics
    )
    logger.info(f"Scope validator '{config.validator}' initialized")
    return validator
