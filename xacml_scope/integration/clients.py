"""
Clients for the external systems a scope validator depends on: application
lookup, validation enablement, and the XACML decision oracle (PDP).
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

import aiohttp

from ..auth.types import OAuthApplication
from ..types.errors import ApplicationLookupError, ErrorCode, OracleError
from .context import TenantContext

logger = logging.getLogger(__name__)


class ApplicationStore(ABC):
    """Resolves OAuth applications by client id."""

    @abstractmethod
    async def get_application(self, client_id: str) -> OAuthApplication:
        """
        Get the application registered for a client id.

        Raises:
            ApplicationLookupError: If no application is registered
        """
        pass


class InMemoryApplicationStore(ApplicationStore):
    """In-memory application store for development and testing."""

    def __init__(self):
        self._applications: Dict[str, OAuthApplication] = {}

    def register(self, application: OAuthApplication) -> None:
        """Register an application under its client id."""
        self._applications[application.client_id] = application

    def remove(self, client_id: str) -> bool:
        """Remove an application."""
        return self._applications.pop(client_id, None) is not None

    async def get_application(self, client_id: str) -> OAuthApplication:
        application = self._applications.get(client_id)
        if application is None:
            raise ApplicationLookupError(
                f"No OAuth application registered for client id '{client_id}'",
                client_id=client_id
            )
        return application


class ValidationConfig(ABC):
    """Per-application switch for externalized scope validation."""

    @abstractmethod
    async def is_validation_enabled(self, application_name: str, client_id: str,
                                    tenant_domain: str) -> bool:
        """Whether XACML scope validation runs for the application."""
        pass


class InMemoryValidationConfig(ValidationConfig):
    """
    Validation switches keyed by (application name, tenant domain).
    Applications without an entry use the default.
    """

    def __init__(self, default: bool = False):
        self.default = default
        self._enabled: Dict[Tuple[str, str], bool] = {}

    def set_enabled(self, application_name: str, tenant_domain: str, enabled: bool = True) -> None:
        """Enable or disable validation for an application."""
        self._enabled[(application_name, tenant_domain)] = enabled

    async def is_validation_enabled(self, application_name: str, client_id: str,
                                    tenant_domain: str) -> bool:
        return self._enabled.get((application_name, tenant_domain), self.default)


class DecisionOracle(ABC):
    """XACML policy decision point."""

    @abstractmethod
    async def get_decision(self, request: str) -> str:
        """
        Evaluate a XACML request document.

        Args:
            request: XACML request document

        Returns:
            str: XACML response document

        Raises:
            OracleError: If no response could be obtained
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the oracle."""
        pass


DecisionFunction = Callable[[str], Union[str, Awaitable[str]]]


class CallableDecisionOracle(DecisionOracle):
    """
    Decision oracle backed by an in-process function. Coroutine functions
    are awaited on the loop; anything else runs in the default executor so
    a blocking PDP cannot stall the loop or outlive the call timeout. An
    awaitable returned by a plain callable is awaited as well.
    """

    def __init__(self, func: DecisionFunction):
        self.func = func

    async def get_decision(self, request: str) -> str:
        try:
            if asyncio.iscoroutinefunction(self.func):
                return await self.func(request)

            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self.func, request)
            if inspect.isawaitable(result):
                result = await result
            return result
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(f"Decision function failed: {e}", cause=e)


class HttpDecisionOracle(DecisionOracle):
    """
    Decision oracle reached over HTTP. The request document is POSTed as
    ``application/xml`` and the response body is returned as-is. When a
    tenant context is supplied the active tenant is sent in a header.
    """

    TENANT_HEADER = "X-Tenant-Domain"

    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
        tenant_context: Optional[TenantContext] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.endpoint = endpoint
        self._auth_headers = (
            {"Authorization": aiohttp.BasicAuth(username, password or "").encode()} if username else {}
        )
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.tenant_context = tenant_context
        self._session = session
        self._owns_session = session is None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def get_decision(self, request: str) -> str:
        headers = {
            'Content-Type': 'application/xml',
            'Accept': 'application/xml',
            **self._auth_headers,
        }
        if self.tenant_context is not None:
            tenant = self.tenant_context.current_tenant()
            if tenant:
                headers[self.TENANT_HEADER] = tenant

        session = await self._get_session()
        try:
            async with session.post(
                self.endpoint,
                data=request.encode("utf-8"),
                headers=headers,
                timeout=self.timeout
            ) as response:
                body = await response.text()
                if response.status != 200:
                    raise OracleError(
                        f"PDP returned HTTP {response.status}",
                        details={'status': response.status, 'endpoint': self.endpoint}
                    )
                return body
        except asyncio.TimeoutError as e:
            raise OracleError(
                f"PDP request to {self.endpoint} timed out",
                error_code=ErrorCode.TIMEOUT,
                cause=e
            )
        except aiohttp.ClientError as e:
            raise OracleError(f"PDP request to {self.endpoint} failed: {e}", cause=e)

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            self.logger.info("Closing PDP client session")
            await self._session.close()
        self._session = None
