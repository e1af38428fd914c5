"""JSON-over-HTTP transport shared by the upstream adapters.

:class:`UpstreamTransport` is the single outbound chokepoint: it injects the
bearer token, applies the request timeout, classifies failures into the
:mod:`sitedesk.upstream.errors` taxonomy and retries transient failures with
exponential backoff.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import random
import typing as typ

import httpx
import msgspec

from sitedesk.logging import get_logger, log_debug, log_error, log_warning

from .errors import (
    AlreadyExistsError,
    UpstreamAuthError,
    UpstreamClientError,
    UpstreamConflictError,
    UpstreamError,
    UpstreamNotFoundError,
    UpstreamResponseShapeError,
    UpstreamServerError,
    UpstreamTimeoutError,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

type Sleep = cabc.Callable[[float], cabc.Awaitable[None]]

_HTTP_NO_CONTENT = 204
_HTTP_ERROR_THRESHOLD = 400
_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_UNPROCESSABLE = 422
_AUTH_STATUSES = frozenset({401, 403})
_CONFLICT_STATUSES = frozenset({409, 412})
# GitHub signals a stale or missing contents SHA in the message text; the
# markers only count when the message quotes the sha field.
_CONFLICT_MARKERS = ("does not match", "wasn't supplied")
_SHA_FIELD = '"sha"'
_ALREADY_EXISTS_MARKER = "already a collaborator"
_DETAIL_PREVIEW_LIMIT = 200


@dc.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Backoff schedule for transient upstream failures.

    Attributes
    ----------
    max_retries
        Retries after the first attempt.
    base_delay_ms
        Delay before the first retry; doubles on each subsequent retry.

    """

    max_retries: int = 3
    base_delay_ms: int = 200

    @property
    def max_attempts(self) -> int:
        """Return the total number of attempts, first one included."""
        return self.max_retries + 1

    def delay_s(self, retry_number: int, jitter: float) -> float:
        """Return the delay before retry ``retry_number`` (zero-based).

        ``jitter`` is a value in ``[0, 1)`` scaled to at most one base delay.
        """
        base = self.base_delay_ms / 1000
        return base * (2**retry_number) + base * jitter


def _error_detail(response: httpx.Response) -> str | None:
    """Extract a human-readable message from an upstream error body."""
    try:
        payload = msgspec.json.decode(response.content)
    except msgspec.DecodeError:
        text = response.text.strip()
        return text[:_DETAIL_PREVIEW_LIMIT] or None

    if not isinstance(payload, dict):
        return None

    parts: list[str] = []
    message = payload.get("message")
    if isinstance(message, str):
        parts.append(message)
    # Vercel nests the message under ``error``.
    nested = payload.get("error")
    if isinstance(nested, dict) and isinstance(nested.get("message"), str):
        parts.append(nested["message"])
    elif isinstance(nested, str):
        parts.append(nested)
    errors = payload.get("errors")
    if isinstance(errors, list):
        parts.extend(
            entry["message"]
            for entry in errors
            if isinstance(entry, dict) and isinstance(entry.get("message"), str)
        )
    return "; ".join(parts) or None


def classify_failure(service: str, response: httpx.Response) -> UpstreamError:
    """Map a non-2xx upstream response onto the error taxonomy.

    Parameters
    ----------
    service
        Upstream name used in error messages.
    response
        The failed response.

    Returns
    -------
    UpstreamError
        The error to raise. 5xx responses yield :class:`UpstreamServerError`,
        which the transport treats as retryable.

    """
    status = response.status_code
    detail = _error_detail(response)
    lowered = (detail or "").lower()

    error_cls: type[UpstreamError]
    if status in _AUTH_STATUSES:
        error_cls = UpstreamAuthError
    elif status == httpx.codes.NOT_FOUND:
        error_cls = UpstreamNotFoundError
    elif status in _CONFLICT_STATUSES or (
        status < _HTTP_SERVER_ERROR_THRESHOLD
        and _SHA_FIELD in lowered
        and any(marker in lowered for marker in _CONFLICT_MARKERS)
    ):
        error_cls = UpstreamConflictError
    elif status == _HTTP_UNPROCESSABLE and _ALREADY_EXISTS_MARKER in lowered:
        error_cls = AlreadyExistsError
    elif status < _HTTP_SERVER_ERROR_THRESHOLD:
        error_cls = UpstreamClientError
    else:
        error_cls = UpstreamServerError
    return error_cls.from_response(service, status, detail)


def _decode_body(service: str, response: httpx.Response) -> typ.Any:  # noqa: ANN401 - arbitrary JSON
    if response.status_code == _HTTP_NO_CONTENT or not response.content:
        return {}
    try:
        return msgspec.json.decode(response.content)
    except msgspec.DecodeError as exc:
        raise UpstreamResponseShapeError.missing(service, "JSON body") from exc


class UpstreamTransport:
    """Authenticated JSON client for one upstream API.

    Parameters
    ----------
    service
        Short upstream name used in logs and errors.
    base_url
        API root; request paths are resolved against it.
    token
        Bearer token injected into every request.
    timeout_s
        Per-request timeout.
    retry
        Backoff schedule for transient failures.
    headers
        Additional default headers.
    http_client
        Optional pre-built client, mainly for tests. When omitted the
        transport creates and owns one.
    sleep
        Awaitable used between retries.

    """

    def __init__(  # noqa: PLR0913 - adapter wiring
        self,
        *,
        service: str,
        base_url: str,
        token: str,
        timeout_s: float,
        retry: RetryPolicy | None = None,
        headers: cabc.Mapping[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Configure the transport and its HTTP client."""
        self._service = service
        self._base_url = base_url.rstrip("/")
        self._retry = retry or RetryPolicy()
        self._sleep = sleep or asyncio.sleep
        self._auth_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": "sitedesk/0.1",
            **(headers or {}),
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)
        self._timeout_s = timeout_s

    @property
    def service(self) -> str:
        """Return the upstream name."""
        return self._service

    async def aclose(self) -> None:
        """Close the HTTP client when this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: object | None = None,
        params: cabc.Mapping[str, str | int] | None = None,
        retry: bool = True,
    ) -> typ.Any:  # noqa: ANN401 - arbitrary JSON
        """Send a request and return the decoded JSON body.

        Pass ``retry=False`` for requests that must not be repeated, such as
        ones creating a resource; they get a single attempt.

        Raises
        ------
        UpstreamError
            A classified failure; see :func:`classify_failure`. Transient
            failures are only raised after the retry budget is spent.

        """
        url = f"{self._base_url}{path}"
        failure: UpstreamError | None = None
        timed_out = False
        max_attempts = self._retry.max_attempts if retry else 1

        for attempt in range(max_attempts):
            if attempt:
                delay = self._retry.delay_s(attempt - 1, random.random())  # noqa: S311 - backoff jitter
                log_warning(
                    logger,
                    "%s %s %s failed (%s); retry %d/%d in %.3fs",
                    self._service,
                    method,
                    path,
                    failure,
                    attempt,
                    max_attempts - 1,
                    delay,
                )
                await self._sleep(delay)

            try:
                response = await self._client.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=self._auth_headers,
                    timeout=self._timeout_s,
                )
            except httpx.TimeoutException as exc:
                timed_out = True
                failure = UpstreamServerError.network(self._service, repr(exc))
                continue
            except httpx.RequestError as exc:
                timed_out = False
                failure = UpstreamServerError.network(self._service, str(exc))
                continue

            log_debug(
                logger,
                "%s %s %s -> %d",
                self._service,
                method,
                path,
                response.status_code,
            )
            if response.status_code < _HTTP_ERROR_THRESHOLD:
                return _decode_body(self._service, response)

            error = classify_failure(self._service, response)
            if not isinstance(error, UpstreamServerError):
                raise error
            timed_out = False
            failure = error

        if timed_out:
            failure = UpstreamTimeoutError.exhausted(self._service, max_attempts)
        log_error(
            logger,
            "%s %s %s gave up after %d attempts: %s",
            self._service,
            method,
            path,
            max_attempts,
            failure,
        )
        if failure is None:  # pragma: no cover - max_attempts is always >= 1
            raise UpstreamServerError.network(self._service, "no attempt made")
        raise failure


__all__ = ["RetryPolicy", "Sleep", "UpstreamTransport", "classify_failure"]
