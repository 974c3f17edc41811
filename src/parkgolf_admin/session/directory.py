"""
Admin directory: where the session looks admins up.

`GatewayAdminDirectory` talks to the admin RPC gateway over httpx,
`InMemoryAdminDirectory` serves the same contract from a dict for tests and
local development.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from parkgolf_admin.api.exceptions import (
    BadRequestException,
    InternalServerException,
    NotFoundException,
    ServiceUnavailableException,
    UnauthorizedException,
    response_to_http_exception,
)
from parkgolf_admin.permissions.principal import Admin, parse_admin_record
from parkgolf_admin.permissions.scope import ScopeFilter
from parkgolf_admin.settings import settings

logger = logging.getLogger(__name__)


class SessionTokens(BaseModel):
    """Opaque gateway tokens. Only stored and handed back, never interpreted."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class LoginResult(SessionTokens):
    admin_id: int


class AdminDirectory(ABC):

    @abstractmethod
    async def get_admin(self, admin_id: int) -> Admin:
        """Fetch one admin. Raises NotFoundException when no such admin exists."""
        pass

    @abstractmethod
    async def list_admins(self, scope_filter: Optional[ScopeFilter] = None) -> List[Admin]:
        pass

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> LoginResult:
        """Exchange credentials for an admin id. Raises UnauthorizedException on bad credentials."""
        pass

    @abstractmethod
    async def revoke(self, tokens: SessionTokens) -> None:
        pass

    async def aclose(self) -> None:
        pass


# BFF error codes that carry a meaning beyond "bad request"
_ENVELOPE_ERROR_CODES = {
    "NOT_FOUND": NotFoundException,
    "ADMIN_NOT_FOUND": NotFoundException,
    "UNAUTHORIZED": UnauthorizedException,
    "INVALID_CREDENTIALS": UnauthorizedException,
}


def unwrap_envelope(payload: Any) -> Any:
    """Return the data of a `{success, data, error}` envelope, or the payload itself when bare."""
    if not isinstance(payload, dict) or "success" not in payload:
        return payload

    if payload.get("success") is False:
        error = payload.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message") or code
        else:
            code = None
            message = error
        exception_class = _ENVELOPE_ERROR_CODES.get(str(code).upper(), BadRequestException)
        raise exception_class(detail=message)

    return payload.get("data")


def extract_list(payload: Any, item_key: Optional[str] = None) -> List[Any]:
    """Find the list of records in the shapes list endpoints answer with."""
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []

    data = payload.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in (item_key, "items"):
            if key and isinstance(data.get(key), list):
                return data[key]

    for key in ("items", item_key):
        if key and isinstance(payload.get(key), list):
            return payload[key]

    return []


def _error_details(response: httpx.Response) -> Any:
    try:
        payload = response.json()
    except ValueError:
        return response.text or None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return error.get("message") or error.get("code")
        return error or payload.get("message") or payload.get("detail") or payload
    return payload


class GatewayAdminDirectory(AdminDirectory):
    """
    Admin directory backed by the RPC gateway.

    Every call uses one of two timeout tiers: quick for single-record
    lookups and auth, list for listings.
    Transport failures surface as ServiceUnavailableException, error statuses
    are mapped with `response_to_http_exception`.
    """

    def __init__(self, url_base: Optional[str] = None, headers: Optional[Dict[str, str]] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url_base = url_base or settings.ADMIN_GATEWAY_URL
        self.quick_timeout = settings.ADMIN_GATEWAY_QUICK_TIMEOUT
        self.list_timeout = settings.ADMIN_GATEWAY_LIST_TIMEOUT
        self.client = httpx.AsyncClient(
            base_url=self.url_base,
            headers=headers,
            transport=transport,
            timeout=self.quick_timeout,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, timeout: float, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Gateway timeout on {method} {url} after {timeout}s: {e}")
            raise ServiceUnavailableException(detail="unavailable")
        except httpx.TransportError as e:
            logger.error(f"Gateway unreachable on {method} {url}: {e}")
            raise ServiceUnavailableException(detail="unavailable")

        if response.is_error:
            exception = response_to_http_exception(response.status_code, _error_details(response))
            if response.status_code >= 500:
                logger.error(f"Gateway error {response.status_code} on {method} {url}")
            raise exception if exception is not None else InternalServerException(detail="internal")

        if not response.content:
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.error(f"Gateway returned a non-JSON body on {method} {url}")
            raise InternalServerException(detail="internal")

        return unwrap_envelope(payload)

    async def get_admin(self, admin_id: int) -> Admin:
        data = await self._request("GET", f"/admin/admins/{admin_id}", self.quick_timeout)
        if isinstance(data, dict) and isinstance(data.get("admin"), dict):
            data = data["admin"]
        if not data:
            raise NotFoundException(detail=f"Admin {admin_id} not found")
        return parse_admin_record(data)

    async def list_admins(self, scope_filter: Optional[ScopeFilter] = None) -> List[Admin]:
        params = scope_filter.to_params() if scope_filter is not None else None
        data = await self._request("GET", "/admin/admins", self.list_timeout, params=params)
        return [parse_admin_record(record) for record in extract_list(data, "admins")]

    async def authenticate(self, email: str, password: str) -> LoginResult:
        data = await self._request(
            "POST", "/admin/auth/login", self.quick_timeout,
            json={"email": email, "password": password},
        )
        if not isinstance(data, dict):
            raise InternalServerException(detail="internal")

        user = data.get("user") or data.get("admin") or {}
        admin_id = user.get("id") if isinstance(user, dict) else None
        if admin_id is None:
            logger.error("Gateway login response carries no admin id")
            raise InternalServerException(detail="internal")

        return LoginResult(
            admin_id=admin_id,
            access_token=data.get("accessToken"),
            refresh_token=data.get("refreshToken"),
        )

    async def revoke(self, tokens: SessionTokens) -> None:
        headers = {"Authorization": f"Bearer {tokens.access_token}"} if tokens.access_token else None
        await self._request(
            "POST", "/admin/auth/logout", self.quick_timeout,
            json={"refreshToken": tokens.refresh_token}, headers=headers,
        )


class InMemoryAdminDirectory(AdminDirectory):
    """Directory over a fixed set of admins and passwords"""

    def __init__(self, admins: Iterable[Admin] = (), passwords: Optional[Dict[str, str]] = None):
        self.admins: Dict[int, Admin] = {admin.id: admin for admin in admins}
        self.passwords: Dict[str, str] = dict(passwords or {})
        self.revoked: List[SessionTokens] = []
        self._token_counter = 0

    def put(self, admin: Admin) -> None:
        self.admins[admin.id] = admin

    async def get_admin(self, admin_id: int) -> Admin:
        admin = self.admins.get(admin_id)
        if admin is None:
            raise NotFoundException(detail=f"Admin {admin_id} not found")
        return admin

    async def list_admins(self, scope_filter: Optional[ScopeFilter] = None) -> List[Admin]:
        admins = sorted(self.admins.values(), key=lambda a: a.id)
        if scope_filter is None:
            return admins
        if scope_filter.company_id is not None:
            admins = [a for a in admins if a.company_id == scope_filter.company_id]
        if scope_filter.course_ids:
            admins = [a for a in admins if a.course_ids & scope_filter.course_ids]
        return admins

    async def authenticate(self, email: str, password: str) -> LoginResult:
        admin = next((a for a in self.admins.values() if a.email == email), None)
        if admin is None or self.passwords.get(email) != password:
            raise UnauthorizedException(detail="Invalid credentials")
        self._token_counter += 1
        return LoginResult(
            admin_id=admin.id,
            access_token=f"access-{admin.id}-{self._token_counter}",
            refresh_token=f"refresh-{admin.id}-{self._token_counter}",
        )

    async def revoke(self, tokens: SessionTokens) -> None:
        self.revoked.append(tokens)
