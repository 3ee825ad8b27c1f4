"""Execute tools as HTTP requests with :mod:`httpx`.

:class:`ApiClient` turns a tool identifier plus a flat parameter mapping into
one HTTP request:

- **Routing** -- every parameter goes to the path, query string, headers or
  ``Cookie`` header according to the ``x-parameter-location`` annotation in
  the tool's input schema.  Without an annotation, ``body`` is the request
  body, names that appear as ``{name}`` in the path template fill the path,
  properties flattened from an object body are collected back into the body,
  and everything else is sent as a query parameter.
- **Bodies** -- JSON bodies are attached to POST, PUT and PATCH only.
- **Results** -- HTTP error statuses, transport failures and malformed
  identifiers all come back as :class:`~spectools.models.ApiCallResult`
  with ``success=False``.  :meth:`ApiClient.execute` does not raise.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from spectools.exceptions import IdentifierFormatError
from spectools.models import ApiCallResult, ParameterLocation, Tool
from spectools.tools.creation import LOCATION_KEY
from spectools.tools.identifiers import decode_tool_id

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
_BODY_PARAM = "body"


class ApiClient:
    """Blocking HTTP client that executes tools.

    Args:
        base_url: API root; tool paths are appended to it.
        headers: Headers sent with every request (typically auth).
        timeout: Per-request timeout in seconds.
        transport: Optional :class:`httpx.BaseTransport`, e.g. an
            :class:`httpx.MockTransport` in tests.

    Example::

        with ApiClient("https://api.example.com", {"Authorization": "Bearer t"}) as client:
            result = client.execute("GET::users__---id", {"id": 42})
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            headers=headers or {},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        logger.debug("Created API client for base URL: %s", self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    def execute(
        self,
        tool_id: str,
        parameters: Optional[dict[str, Any]] = None,
        tool: Optional[Tool] = None,
    ) -> ApiCallResult:
        """Send the request described by *tool_id* and *parameters*.

        Args:
            tool_id: An endpoint identifier such as ``GET::users__---id``.
            parameters: Flat mapping of parameter names to values.  ``None``
                values are skipped.
            tool: The tool the identifier belongs to.  Its input schema
                supplies parameter locations; without it locations are
                inferred from the path template.

        Returns:
            The call outcome.  ``success`` is ``True`` only for 2xx
            responses.
        """
        logger.debug("Executing API call: %s", tool_id)
        try:
            method, path = decode_tool_id(tool_id)
        except IdentifierFormatError as exc:
            logger.error("API call failed: %s", exc)
            return ApiCallResult(success=False, error=str(exc))

        request = self.build_request(method, path, parameters or {}, tool)
        try:
            response = self._client.send(request)
        except httpx.HTTPError as exc:
            logger.error("API call failed: %s", exc)
            return ApiCallResult(success=False, error=str(exc) or type(exc).__name__)

        return _result_from_response(response)

    def build_request(
        self,
        method: str,
        path: str,
        parameters: dict[str, Any],
        tool: Optional[Tool] = None,
    ) -> httpx.Request:
        """Route *parameters* and build the :class:`httpx.Request`."""
        properties = (tool.input_schema.get("properties") or {}) if tool else {}

        path_params: dict[str, Any] = {}
        query: dict[str, Any] = {}
        headers: dict[str, str] = {}
        cookies: dict[str, Any] = {}
        body_fields: dict[str, Any] = {}
        body: Any = None

        for key, value in parameters.items():
            if value is None:
                continue
            prop = properties.get(key)
            location = prop.get(LOCATION_KEY) if isinstance(prop, dict) else None

            if location == ParameterLocation.PATH.value:
                path_params[key] = value
            elif location == ParameterLocation.QUERY.value:
                query[key] = value
            elif location == ParameterLocation.HEADER.value:
                headers[key] = str(value)
            elif location == ParameterLocation.COOKIE.value:
                cookies[key] = value
            elif key == _BODY_PARAM:
                body = value
            elif f"{{{key}}}" in path:
                path_params[key] = value
            elif prop is not None:
                # Declared without a location: a property of a flattened body
                body_fields[key] = value
            else:
                query[key] = value

        final_path = path
        for key, value in path_params.items():
            final_path = final_path.replace(f"{{{key}}}", quote(str(value), safe=""))

        if cookies:
            headers["Cookie"] = "; ".join(
                f"{k}={quote(str(v), safe='')}" for k, v in cookies.items()
            )

        if body is None and body_fields:
            body = body_fields

        json_body = None
        if method in _BODY_METHODS and body is not None:
            json_body = body
        elif body is not None:
            logger.debug("Ignoring request body for %s %s", method, path)

        logger.debug("Built request: %s %s%s", method, self._base_url, final_path)
        return self._client.build_request(
            method,
            final_path,
            params=query or None,
            headers=headers or None,
            json=json_body,
        )

    def test_connection(self) -> bool:
        """Return ``True`` if the API root answers with a status below 500."""
        try:
            response = self._client.get("/")
        except httpx.HTTPError as exc:
            logger.debug("Connection test failed: %s", exc)
            return False
        return response.status_code < 500


def _result_from_response(response: httpx.Response) -> ApiCallResult:
    try:
        data: Any = response.json()
    except ValueError:
        data = response.text

    success = 200 <= response.status_code < 300
    error: Optional[str] = None
    if not success:
        error = f"HTTP {response.status_code}: {response.reason_phrase}"
        if isinstance(data, dict):
            detail = data.get("message") or data.get("error")
            if detail:
                error = f"{error} - {detail}"

    return ApiCallResult(
        success=success,
        status_code=response.status_code,
        data=data,
        headers=dict(response.headers),
        error=error,
    )
