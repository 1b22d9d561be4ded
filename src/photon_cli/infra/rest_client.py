"""``requests``-backed HTTP transport for the controller REST API.

This module is the **only** place in the codebase that imports
``requests``.  All transport exceptions are caught here and re-raised as
typed :class:`~photon_cli.exceptions.TransportError` subclasses, and
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urljoin

import requests

from photon_cli.exceptions import ResourceNotFoundError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 30.0
"""Per-request timeout in seconds (connect + read)."""


class RestClient:
    """Thin JSON-over-HTTP client bound to one controller endpoint.

    Usage::

        rest = RestClient("https://10.0.0.5:9000", token="...")
        task = rest.post("/v1/projects/p1/clusters", payload={...})

    Parameters
    ----------
    endpoint:
        Base URL of the controller (scheme, host and port).
    token:
        Optional bearer token sent with every request.
    verify:
        Whether to verify the server's TLS certificate.
    timeout:
        Per-request timeout in seconds.
    session:
        Pre-built :class:`requests.Session`; injectable for tests.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        token: str | None = None,
        verify: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint: str = endpoint.rstrip("/")
        self._timeout: float = timeout
        self._session: requests.Session = session or requests.Session()
        self._session.verify = verify
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, path: str, params: Mapping[str, str] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        payload: Any = None,
        *,
        files: Mapping[str, Any] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> Any:
        return self.request("POST", path, payload=payload, files=files, data=data)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def url_for(self, path: str) -> str:
        """Resolve a server-relative path or an absolute link to a URL."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.endpoint + "/", path.lstrip("/"))

    # ------------------------------------------------------------------
    # Core request
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Any = None,
        files: Mapping[str, Any] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (or ``None``).

        Raises
        ------
        ResourceNotFoundError
            On HTTP 404.
        TransportError
            On connection problems, timeouts, any other non-2xx status,
            or an undecodable body.
        """
        url = self.url_for(path)
        kwargs: dict[str, Any] = {"timeout": self._timeout}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v}
        if files is not None:
            kwargs["files"] = files
            if data:
                kwargs["data"] = data
        elif payload is not None:
            kwargs["json"] = payload

        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.SSLError as exc:
            raise TransportError(
                f"TLS verification failed for {self.endpoint}: {exc}",
                hint="Use 'photon target set --nocertcheck <endpoint>' for self-signed certificates.",
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                f"Cannot reach {self.endpoint}: {exc}",
                hint="Check the target with 'photon target show'.",
            ) from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code >= 400:
            self._raise_for_status(method, url, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Invalid JSON in response to {method} {url}.",
                status_code=response.status_code,
            ) from exc

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_for_status(method: str, url: str, response: requests.Response) -> None:
        """Translate a non-2xx response into a domain exception.

        Always raises.  The controller's ``{code, message}`` error body is
        surfaced when present.
        """
        code: str | None = None
        message = response.reason or "request failed"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = str(body["code"]) if body.get("code") else None
            message = str(body.get("message") or message)

        text = f"{method} {url} failed with HTTP {response.status_code}: {message}"
        if response.status_code == 404:
            raise ResourceNotFoundError(text, status_code=404, error_code=code)
        hint = None
        if response.status_code in (401, 403):
            hint = "Log in with 'photon target login --access-token <token>'."
        raise TransportError(text, status_code=response.status_code, error_code=code, hint=hint)
