"""
Tenant context management for decision calls.
The PDP evaluates policies of the tenant that is active when it is called.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Tuple


# Context variables for request-scoped data
_tenant_stack: ContextVar[Tuple[str, ...]] = ContextVar('tenant_stack', default=())


class TenantContext(ABC):
    """
    Tenant flow interface. Every enter_tenant is paired with exactly one
    exit_tenant; flows may nest.
    """

    @abstractmethod
    def enter_tenant(self, tenant_domain: str) -> None:
        """Make tenant_domain the active tenant."""
        pass

    @abstractmethod
    def exit_tenant(self) -> None:
        """Restore the tenant that was active before the last enter_tenant."""
        pass

    @abstractmethod
    def current_tenant(self) -> Optional[str]:
        """Get the active tenant, if any."""
        pass


class ContextVarTenantContext(TenantContext):
    """
    Tenant context backed by a context variable, so concurrent tasks each
    see their own tenant.
    """

    def enter_tenant(self, tenant_domain: str) -> None:
        _tenant_stack.set(_tenant_stack.get() + (tenant_domain,))

    def exit_tenant(self) -> None:
        stack = _tenant_stack.get()
        if not stack:
            raise RuntimeError("exit_tenant called without a matching enter_tenant")
        _tenant_stack.set(stack[:-1])

    def current_tenant(self) -> Optional[str]:
        stack = _tenant_stack.get()
        return stack[-1] if stack else None

    def depth(self) -> int:
        """Number of nested tenant flows currently entered."""
        return len(_tenant_stack.get())


@contextmanager
def tenant_flow(context: TenantContext, tenant_domain: str) -> Iterator[TenantContext]:
    """Run a block inside a tenant flow, always exiting it afterwards."""
    context.enter_tenant(tenant_domain)
    try:
        yield context
    finally:
        context.exit_tenant()
