"""
Low-level HTTP client: token lifecycle and status/payload mapping
  - exchanges user:password + postage card for a bearer token at the token endpoint;
  - refreshes lazily: the expiry is only checked right before a request is sent;
  - post_json / delete_json / post_file entry points, agnostic of business fields;
  - no retries, no backoff: the first failure is raised to the caller.
"""

from __future__ import annotations
import base64, json, logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from urllib.parse import urljoin

import requests

from correios_hub.core.config import settings
from correios_hub.integrations.correios.errors import (
    CorreiosAuthError, CorreiosPayloadError, CorreiosStatusError, CorreiosTransportError,
)
from correios_hub.utils.clock import now_utc

logger = logging.getLogger(__name__)

_BODY_LOG_LIMIT = 1000


@dataclass
class _Token:
    value: str
    expires_at: datetime  # UTC


class CorreiosHttpClient:
    """Correios API low-level client: owns the session and the single (token, expiry) pair."""

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        postage_card: Optional[str] = None,
        production: Optional[bool] = None,
        *,
        base_url: Optional[str] = None,
        connect_timeout: Optional[int] = None,
        read_timeout: Optional[int] = None,
        token_ttl_sec: Optional[int] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        """Arguments override settings, so tests and multi-account callers can skip the env."""
        if production is None:
            production = settings.CORREIOS_PRODUCTION
        self.production = production
        self.base_url = (base_url or settings.base_url_for(production)).rstrip("/") + "/"

        self.username = username or settings.CORREIOS_USERNAME or ""
        if password is None and settings.CORREIOS_PASSWORD is not None:
            password = settings.CORREIOS_PASSWORD.get_secret_value()
        self._password = password or ""
        self.postage_card = postage_card or settings.CORREIOS_POSTAGE_CARD or ""

        self.connect_timeout = connect_timeout or settings.CORREIOS_CONNECT_TIMEOUT
        self.read_timeout = read_timeout or settings.CORREIOS_READ_TIMEOUT
        self.token_ttl_sec = token_ttl_sec or settings.CORREIOS_TOKEN_TTL_SEC

        self._session = session or requests.Session()
        self._clock = clock
        self._token: Optional[_Token] = None


    # ---------- Token lifecycle ----------
    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._clock() < self._token.expires_at

    @property
    def token_expires_at(self) -> Optional[datetime]:
        return self._token.expires_at if self._token else None

    def ensure_valid(self) -> None:
        """Re-authenticate when there is no token or now >= expiry; otherwise no-op."""
        if not self.is_authenticated:
            self.authenticate()

    def authenticate(self) -> None:
        """POST the postage card with Basic auth; 201 + {"token": ...} replaces the stored token."""
        url = self._url(settings.CORREIOS_TOKEN_ENDPOINT)
        credentials = base64.b64encode(f"{self.username}:{self._password}".encode("utf-8")).decode("ascii")
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Basic {credentials}",
        }

        try:
            resp = self._session.request(
                "POST", url, json={"numero": self.postage_card}, headers=headers, timeout=self._timeout(),
            )
        except requests.RequestException as e:
            raise CorreiosTransportError(f"token request error: {e}") from e

        self._log_response("POST", url, resp, include_body=False)  # body carries the token

        if resp.status_code != 201:
            raise CorreiosAuthError("token request rejected", resp.status_code, resp.text)

        data = self._decode(resp, "token request")
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise CorreiosPayloadError("token missing in response", resp.status_code, resp.text)

        expires_at = self._clock() + timedelta(seconds=self.token_ttl_sec)
        self._token = _Token(value=token, expires_at=expires_at)
        logger.info("Correios authenticated; token expires at %s", expires_at.isoformat())


    # ---------- Public requests ----------
    def post_json(self, path: str, json_body: Any, *, expected_status: int = 200) -> Any:
        """POST a JSON body and return the decoded JSON."""
        resp = self._request("POST", path, expected_status, json=json_body)
        return self._decode(resp, f"POST {path}")

    def delete_json(self, path: str, params: Optional[Dict[str, Any]] = None, *, expected_status: int = 200) -> Any:
        """DELETE with optional query params and return the decoded JSON."""
        resp = self._request("DELETE", path, expected_status, params=params)
        return self._decode(resp, f"DELETE {path}")

    def post_file(self, path: str, files: Dict[str, Any], *, expected_status: int = 200) -> Any:
        """POST a multipart body built in memory by requests; returns the decoded JSON."""
        resp = self._request("POST", path, expected_status, files=files)
        return self._decode(resp, f"POST {path}")

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "CorreiosHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


    # ---------- Internals ----------
    def _request(self, method: str, path: str, expected_status: int, **kwargs) -> requests.Response:
        """One authenticated call: ensure token, send, map failures. Never retries."""
        self.ensure_valid()

        url = self._url(path)
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token.value}",  # type: ignore[union-attr]
            "User-Agent": settings.PROJECT_NAME,
        }
        # multipart bodies need the boundary Content-Type that requests generates
        if "json" in kwargs:
            headers["Content-Type"] = "application/json"

        try:
            resp = self._session.request(method, url, headers=headers, timeout=self._timeout(), **kwargs)
        except requests.RequestException as e:
            raise CorreiosTransportError(f"{method} {path} request error: {e}") from e

        self._log_response(method, url, resp)

        if resp.status_code != expected_status:
            raise CorreiosStatusError(
                f"{method} {path} unexpected status (expected {expected_status})",
                resp.status_code,
                resp.text,
            )
        return resp

    def _decode(self, resp: requests.Response, context: str) -> Any:
        """Parse the JSON body; failures keep status and raw text on the error."""
        ctype = (resp.headers.get("Content-Type") or "").lower()
        if "application/json" not in ctype:
            logger.warning("Correios non-JSON response Content-Type=%s (%s)", ctype, context)
        try:
            return resp.json()
        except ValueError as e:
            raise CorreiosPayloadError(f"{context}: non-JSON response", resp.status_code, resp.text) from e

    def _log_response(self, method: str, url: str, resp: requests.Response, include_body: bool = True) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        if not include_body:
            logger.debug("Correios response: %s %s -> %s", method, url, resp.status_code)
            return
        body_text = resp.text or ""
        try:
            pretty = json.dumps(resp.json(), ensure_ascii=False, indent=2)
        except ValueError:
            pretty = body_text
        logger.debug("Correios response: %s %s -> %s body=%s", method, url, resp.status_code, pretty[:_BODY_LOG_LIMIT])

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _timeout(self) -> tuple:
        return (self.connect_timeout, self.read_timeout)
