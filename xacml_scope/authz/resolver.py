"""
Maps PDP decisions to the boolean outcome of a scope validation.
"""

import logging
from typing import Optional

from .types import Decision


logger = logging.getLogger(__name__)


class DecisionResolver:
    """
    Resolves a decision to an allow/deny outcome.

    Permit allows. NotApplicable also allows, since a missing policy should
    not block traffic, but it is logged as a warning so the gap can be fixed.
    Deny and Indeterminate deny.
    """

    def resolve(self, decision: Decision, application_name: Optional[str] = None,
                tenant_domain: Optional[str] = None) -> bool:
        """
        Resolve a decision.

        Args:
            decision: Decision returned by the PDP
            application_name: Application the token belongs to, for the warning
            tenant_domain: Tenant owning the application, for the warning

        Returns:
            bool: True if access is allowed
        """
        if decision is Decision.PERMIT:
            return True

        if decision is Decision.NOT_APPLICABLE:
            logger.warning(
                f"No applicable rule for service provider '{application_name}@{tenant_domain}', "
                f"hence validating the token by default. "
                f"Add a validating policy (or unset validation) to fix this warning."
            )
            return True

        return False
