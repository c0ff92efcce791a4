"""
Integration package for the external systems a scope validator consults.
"""

from .clients import (
    ApplicationStore,
    InMemoryApplicationStore,
    ValidationConfig,
    InMemoryValidationConfig,
    DecisionOracle,
    CallableDecisionOracle,
    HttpDecisionOracle,
)
from .context import TenantContext, ContextVarTenantContext, tenant_flow

__all__ = [
    'ApplicationStore',
    'InMemoryApplicationStore',
    'ValidationConfig',
    'InMemoryValidationConfig',
    'DecisionOracle',
    'CallableDecisionOracle',
    'HttpDecisionOracle',
    'TenantContext',
    'ContextVarTenantContext',
    'tenant_flow',
]
