"""
XACML Scope Validator Demo Application

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

This demo validates a few tokens against an in-process PDP that permits
tokens carrying the "read" scope, showing:
- Permit and Deny decisions
- The NotApplicable fail-open path for applications without policies
- Applications that have not opted in to validation
- Audit log retrieval
"""

import asyncio
import logging
import sys

from xacml_scope.audit.logger import MemoryAuditLogger
from xacml_scope.auth.types import AccessToken, AuthenticatedUser, OAuthApplication
from xacml_scope.authz.types import XACML_NS
from xacml_scope.core.config import ValidatorConfig
from xacml_scope.core.factory import build_validator
from xacml_scope.integration.clients import (
    CallableDecisionOracle, InMemoryApplicationStore, InMemoryValidationConfig
)


def _response(decision: str) -> str:
    return (
        f'<Response xmlns="{XACML_NS}"><Result>'
        f'<Decision>{decision}</Decision>'
        f'</Result></Response>'
    )


def demo_pdp(request: str) -> str:
    """Permit 'read' for orders-app, no policy for any other application."""
    if "orders-app" not in request:
        return _response("NotApplicable")
    if ">read<" in request:
        return _response("Permit")
    return _response("Deny")


async def run_demo() -> int:
    print("XACML Scope Validator Demo Application")
    print("=" * 50)
    print()

    applications = InMemoryApplicationStore()
    applications.register(OAuthApplication("orders-app", "orders-client"))
    applications.register(OAuthApplication("reports-app", "reports-client"))
    applications.register(OAuthApplication("legacy-app", "legacy-client"))

    switches = InMemoryValidationConfig()
    switches.set_enabled("orders-app", "carbon.super")
    switches.set_enabled("reports-app", "carbon.super")

    audit_logger = MemoryAuditLogger()
    validator = build_validator(
        ValidatorConfig(),
        applications,
        switches,
        decision_oracle=CallableDecisionOracle(demo_pdp),
        audit_logger=audit_logger,
    )

    alice = AuthenticatedUser("alice")
    cases = [
        ("read token", AccessToken("orders-client", alice, ["read"])),
        ("write token", AccessToken("orders-client", alice, ["write"])),
        ("no policy", AccessToken("reports-client", alice, ["read"])),
        ("validation off", AccessToken("legacy-client", alice, [])),
        ("no subject", AccessToken("orders-client", None, ["read"])),
    ]

    for label, token in cases:
        allowed = await validator.validate(token, "/api/orders")
        mark = "✓" if allowed else "✗"
        print(f"{mark} {label:<15} scopes={token.scopes} -> {'allowed' if allowed else 'denied'}")

    print()
    events = await audit_logger.get_events()
    print(f"Audit log ({len(events)} events):")
    for event in events:
        print(f"  - {event.event_type}: {event.client_id} {event.details.get('outcome')}")

    await validator.close()
    return 0


def main() -> int:
    """Console entry point"""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        return asyncio.run(run_demo())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
