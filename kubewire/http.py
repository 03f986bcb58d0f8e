"""Request/response helpers shared by the CRUD client and the watch session.

Every httpx failure is translated here so that callers only ever see
kubewire errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from kubewire.errors import RequestError, ResponseError


def with_query_values(uri: str, query: Mapping[str, Any] | None = None) -> str:
    """Return *uri* with *query* merged into its query string.

    Parameters already present on *uri* are kept; keys in *query* replace
    them. ``None`` values are dropped.
    """
    params = {key: value for key, value in (query or {}).items() if value is not None}
    if not params:
        return uri
    return str(httpx.URL(uri).copy_merge_params(params))


def request_error(method: str, uri: str, exc: httpx.HTTPError) -> RequestError:
    """Wrap an httpx failure, keeping the HTTP status as the error code."""
    code = 0
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
    return RequestError(f"Failed requesting {method} on `{uri}`: {exc}", code=code, cause=exc)


def decode_json(response: httpx.Response) -> Any:
    """Decode a fully read response body."""
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseError(
            f"Failed decoding response JSON: {exc}",
            code=response.status_code,
            cause=exc,
        ) from exc


async def send_json(
    http: httpx.AsyncClient,
    method: str,
    uri: str,
    body: Mapping[str, Any] | None = None,
) -> Any:
    """Issue one non-streaming call and return the decoded JSON body.

    Raises:
        RequestError:  transport failure or non-2xx status.
        ResponseError: the body is not valid JSON.
    """
    method = method.upper()
    kwargs: dict[str, Any] = {}
    if body is not None:
        kwargs["json"] = dict(body)
    try:
        response = await http.request(method, uri, **kwargs)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise request_error(method, uri, exc) from exc
    return decode_json(response)
