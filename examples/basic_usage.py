"""
Basic XACML scope validator usage example.

This example validates a token against a remote PDP:
- Loading configuration from the environment
- Registering an application and opting it in to validation
- Validating a token for a resource
- Reading the audit log and metrics

Set XACML_SCOPE_PDP_ENDPOINT (and optionally XACML_SCOPE_PDP_USERNAME /
XACML_SCOPE_PDP_PASSWORD) before running it.
"""

import asyncio
import logging

from xacml_scope import AccessToken, AuthenticatedUser, OAuthApplication, ValidatorConfig, build_validator
from xacml_scope.audit import MemoryAuditLogger
from xacml_scope.integration import InMemoryApplicationStore, InMemoryValidationConfig
from xacml_scope.metrics import ValidationMetrics


async def basic_example():
    """Demonstrate basic scope validation"""
    print("Basic XACML Scope Validation Example")
    print("=" * 36)

    # 1. Load configuration
    config = ValidatorConfig.from_env()
    print(f"✓ PDP endpoint: {config.pdp_endpoint}")

    # 2. Register the application and enable validation for it
    applications = InMemoryApplicationStore()
    applications.register(OAuthApplication("myApp", "my-client", "carbon.super"))
    switches = InMemoryValidationConfig()
    switches.set_enabled("myApp", "carbon.super")

    # 3. Build the validator
    audit_logger = MemoryAuditLogger()
    metrics = ValidationMetrics()
    validator = build_validator(config, applications, switches,
                                audit_logger=audit_logger, metrics=metrics)

    try:
        # 4. Validate a token
        token = AccessToken(
            consumer_key="my-client",
            authz_user=AuthenticatedUser("alice", "PRIMARY", "carbon.super"),
            scopes=["read", "write"],
        )
        allowed = await validator.validate(token, "/api/data")
        print(f"✓ Access to /api/data: {'allowed' if allowed else 'denied'}")

        # 5. Check audit log and metrics
        events = await audit_logger.get_events()
        print(f"✓ Audit events logged: {len(events)}")
        print(metrics.export().decode("utf-8"))

    finally:
        # 6. Cleanup
        await validator.close()
        print("✓ Validator closed")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(basic_example())
