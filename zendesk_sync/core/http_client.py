"""JSON HTTP client with basic authentication and bounded re-challenge."""

from __future__ import annotations

import base64
import json
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from ..settings import ConnectionSettings, HttpSettings

_LOGGER = logging.getLogger(__name__)
_JSON_HEADERS = {"Accept": "application/json"}
_BODY_EXCERPT = 200


@dataclass(slots=True)
class HttpRequest:
    url: str
    method: str = "GET"
    params: Mapping[str, str] | None = None
    payload: Mapping[str, Any] | None = None


class HttpClient:
    """Issues JSON requests against the remote API.

    Every call returns the decoded JSON object, or ``None`` when the request
    failed for any reason (status, transport, timeout, content type, parse
    error). Failures are logged here; callers only decide what an absent
    result means for them.
    """

    def __init__(
        self,
        *,
        connection: ConnectionSettings,
        http_settings: HttpSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._connection = connection
        self._http_settings = http_settings or HttpSettings()
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._connection.base_url

    def url(self, *segments: object) -> str:
        path = "/".join(urllib.parse.quote(str(segment), safe="") for segment in segments)
        return f"{self.base_url}/{path}"

    def get(self, url: str, params: Mapping[str, str] | None = None) -> dict[str, Any] | None:
        return self.execute(HttpRequest(url=url, params=params))

    def post(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        return self.execute(HttpRequest(url=url, method="POST", payload=payload))

    def put(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        return self.execute(HttpRequest(url=url, method="PUT", payload=payload))

    def execute(self, request: HttpRequest) -> dict[str, Any] | None:
        response = self._send(request)
        if response is None:
            return None
        return self._decode(request, response)

    def close(self) -> None:
        self._session.close()

    def _send(self, request: HttpRequest) -> requests.Response | None:
        max_attempts = max(1, self._http_settings.max_auth_attempts)
        attempt = 0
        while True:
            attempt += 1
            headers = dict(_JSON_HEADERS)
            headers["Authorization"] = self._basic_auth()
            try:
                response = self._session.request(
                    request.method.upper(),
                    request.url,
                    params=request.params,
                    json=request.payload,
                    headers=headers,
                    timeout=self._http_settings.timeout,
                )
            except requests.Timeout as exc:
                _LOGGER.warning(
                    "Request timed out",
                    extra={"event": "http.timeout", "method": request.method, "url": request.url, "reason": str(exc)},
                )
                return None
            except requests.RequestException as exc:
                _LOGGER.warning(
                    "Request failed",
                    extra={"event": "http.error", "method": request.method, "url": request.url, "reason": str(exc)},
                )
                return None

            if response.status_code == 401 and attempt < max_attempts:
                _LOGGER.info(
                    "Authentication challenge received, retrying",
                    extra={"event": "http.auth_retry", "url": request.url, "attempt": attempt},
                )
                continue
            return response

    def _decode(self, request: HttpRequest, response: requests.Response) -> dict[str, Any] | None:
        if not 200 <= response.status_code < 300:
            _LOGGER.warning(
                "Request is unsuccessful",
                extra={
                    "event": "http.status",
                    "method": request.method,
                    "url": request.url,
                    "status": response.status_code,
                    "response": response.text[:_BODY_EXCERPT],
                },
            )
            return None

        if not response.content:
            _LOGGER.warning("Response is empty", extra={"event": "http.empty", "url": request.url})
            return None

        content_type = response.headers.get("Content-Type")
        if not content_type:
            _LOGGER.warning("Content-Type is undefined", extra={"event": "http.content_type", "url": request.url})
            return None
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type != "application/json":
            _LOGGER.warning(
                "Content-Type must be application/json",
                extra={"event": "http.content_type", "url": request.url, "content_type": content_type},
            )
            return None

        try:
            data = response.json()
        except (ValueError, json.JSONDecodeError):
            _LOGGER.error(
                "Unable to parse the response",
                extra={"event": "http.parse", "url": request.url, "response": response.text[:_BODY_EXCERPT]},
            )
            return None

        if not isinstance(data, dict):
            _LOGGER.error("Expected a JSON object", extra={"event": "http.parse", "url": request.url})
            return None
        return data

    def _basic_auth(self) -> str:
        credentials = f"{self._connection.email}/token:{self._connection.api_token}"
        encoded = base64.b64encode(credentials.encode("iso-8859-1")).decode("ascii")
        return f"Basic {encoded}"
