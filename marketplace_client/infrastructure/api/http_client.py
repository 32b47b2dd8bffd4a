"""HTTP client for the marketplace API.

Thin `httpx.AsyncClient` wrapper that attaches the stored bearer token to
authenticated requests and decodes the response envelope. Failures surface
as exceptions the error translator understands:

- `ApiError` for non-2xx responses and ``success: false`` bodies.
- `EnvelopeError` for bodies that are not an envelope.
- httpx transport exceptions are passed through unchanged.

No retries happen here; reads are retried by the query cache.
"""

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx
import structlog
from pydantic import ValidationError

from marketplace_client.core.config.settings import settings
from marketplace_client.core.exceptions import ApiError, EnvelopeError
from marketplace_client.domain.interfaces.token_store import ITokenStore

from .schemas import Envelope

logger = structlog.get_logger(__name__)

UnauthorizedHandler = Callable[[], Awaitable[Any]]


class ApiClient:
    """Envelope-aware HTTP client.

    Args:
        base_url: API root; defaults to API_BASE_URL.
        token_store: Source of the bearer token for authenticated requests.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use `httpx.MockTransport`).
        on_unauthorized: Awaited when an authenticated request gets HTTP 401.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[ITokenStore] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[UnauthorizedHandler] = None,
    ):
        self._token_store = token_store
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, *, params: Optional[Mapping[str, Any]] = None, auth: bool = False) -> Envelope:
        return await self.request("GET", path, params=params, auth=auth)

    async def post(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Envelope:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Any = None,
        auth: bool = False,
    ) -> Envelope:
        """Send one request and return its decoded envelope.

        Raises:
            ApiError: Non-2xx status or ``success: false``.
            EnvelopeError: Body is not an envelope.
            httpx.TransportError: Connection failures and timeouts.
        """
        headers: Dict[str, str] = {}
        if auth:
            headers["Authorization"] = f"Bearer {await self._access_token()}"
        query = {name: value for name, value in (params or {}).items() if value is not None}

        logger.debug("API request", method=method, path=path, authenticated=auth)
        response = await self._client.request(
            method, path, params=query or None, json=json, data=data, files=files, headers=headers
        )
        envelope = self._decode(response)

        if response.status_code == 401 and auth and self.on_unauthorized is not None:
            logger.warning("Authenticated request rejected", method=method, path=path)
            await self.on_unauthorized()
        if not response.is_success or envelope is None or not envelope.success:
            raise self._api_error(response, envelope)
        return envelope

    async def _access_token(self) -> str:
        pair = await self._token_store.load() if self._token_store is not None else None
        if pair is None:
            raise ApiError(401, "No stored credentials", code="not_authenticated")
        return pair.access_token

    @staticmethod
    def _decode(response: httpx.Response) -> Optional[Envelope]:
        try:
            body = response.json()
        except ValueError:
            if response.is_success:
                raise EnvelopeError("Response body is not JSON")
            return None
        try:
            return Envelope.model_validate(body)
        except ValidationError as e:
            if response.is_success:
                raise EnvelopeError("Response body is not an envelope") from e
            if isinstance(body, dict):
                return Envelope(
                    success=False,
                    message=body.get("message") if isinstance(body.get("message"), str) else None,
                    code=body.get("code") if isinstance(body.get("code"), str) else None,
                    errors=body.get("errors"),
                )
            return None

    @staticmethod
    def _api_error(response: httpx.Response, envelope: Optional[Envelope]) -> ApiError:
        if envelope is None:
            return ApiError(response.status_code, response.reason_phrase)
        return ApiError(
            response.status_code,
            envelope.error_message() or response.reason_phrase,
            server_code=envelope.error_code(),
            errors=envelope.field_errors(),
        )
