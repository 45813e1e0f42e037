from __future__ import annotations

# `json` decodes bodies here so parse failures can be classified as `DecodingError`.
import json
# `logging` reports request failures without hiding them behind silent fallbacks.
import logging
# Typing helpers keep our interfaces explicit while we still operate on JSON dicts at this boundary.
from typing import Any, Mapping, MutableMapping, Optional
# `urlsplit` validates URLs before they reach the network layer.
from urllib.parse import urlsplit

# `requests` performs HTTP calls; we wrap it to centralize timeouts and error handling.
import requests
# `HTTPAdapter` lets us mount a retry policy onto a `requests.Session`.
from requests.adapters import HTTPAdapter
# `Retry` is kept at zero retries by default: a failed fetch surfaces once to the caller.
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


# Base class for every failure of a single fetch call; callers catch this one type.
class FetchError(RuntimeError):
    pass


# The endpoint (or an identifier embedded into it) does not form a usable http(s) URL.
class InvalidURLError(FetchError):
    pass


# The payload is JSON but misses a required key, or the key holds the wrong kind of value.
class InvalidDataError(FetchError):
    pass


class DecodingError(FetchError):
    """
    The body is not valid JSON, or it does not match the expected record shape.

    The underlying exception is kept on `cause` (and chained as `__cause__`).
    """

    def __init__(self, message: str, *, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause


# Transport failures and non-2xx responses from the directory API.
class RequestError(FetchError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# A fetch finished after the scope that started it was cancelled; its result was dropped.
class FetchCancelledError(FetchError):
    pass


def validate_http_url(url: str) -> str:
    # Only absolute http(s) URLs with a host are accepted; anything else is a programming/config error.
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURLError(f"Not a valid http(s) URL: {url!r}")
    return url


# `JsonHttpClient` is a minimal HTTP client for unauthenticated JSON GET endpoints.
class JsonHttpClient:
    """
    Minimal JSON-over-HTTP client.

    - One `requests.Session` per instance (no globals), reused across calls.
    - Retries are opt-in via a mounted adapter; the default is a single attempt.
    - `get_text` returns the raw body so callers decide how JSON decode errors are classified.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        user_agent: str = "bikeradar/0.1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        # Normalize `base_url` so later path joins are consistent (avoid double slashes).
        self._base_url = validate_http_url(base_url.rstrip("/"))
        # A single timeout value keeps behavior predictable and avoids hanging requests.
        self._timeout_s = timeout_s

        # A `Session` reuses connections (keep-alive); tests may inject a fake one.
        self._session = session if session is not None else requests.Session()
        # A stable User-Agent helps the API operators identify traffic.
        self._session.headers.update({"User-Agent": user_agent})

        if session is None:
            retry = Retry(
                total=max_retries,
                connect=max_retries,
                read=max_retries,
                status=max_retries,
                backoff_factor=backoff_factor,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=("GET",),
                respect_retry_after_header=True,
                # Do not raise inside urllib3; we surface a single `RequestError` with context.
                raise_on_status=False,
            )
            # Mount for both schemes: the public directory is served over plain http.
            self._session.mount("https://", HTTPAdapter(max_retries=retry))
            self._session.mount("http://", HTTPAdapter(max_retries=retry))

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_url(self, path: str) -> str:
        # Support absolute URLs so callers can pass a fully formed link.
        if path.startswith("https://") or path.startswith("http://"):
            return validate_http_url(path)
        # Ensure callers can pass either "/path" or "path" without creating a double slash.
        path = path.lstrip("/")
        return validate_http_url(f"{self._base_url}/{path}")

    def get_text(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        # Build the full URL early so we can include it in error messages.
        url = self.build_url(path)
        req_headers: MutableMapping[str, str] = {"Accept": "application/json"}
        if headers:
            req_headers.update(headers)

        try:
            resp = self._session.get(url, params=params, headers=req_headers, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise RequestError(f"Request failed url={url} params={params}: {exc}") from exc

        # Treat any 4xx/5xx as an error; there is no retry at this layer beyond the adapter policy.
        if resp.status_code >= 400:
            raise RequestError(
                f"Request failed ({resp.status_code}) url={url} params={params} body={resp.text[:500]}",
                status_code=resp.status_code,
            )
        logger.debug("GET %s -> %s (%s bytes)", url, resp.status_code, len(resp.content or b""))
        return resp.text

    def get_json(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        text = self.get_text(path, params=params, headers=headers)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DecodingError(
                f"Response body is not valid JSON for path={path}: {text[:200]!r}", cause=exc
            ) from exc

    def close(self) -> None:
        # Close network resources; important for long-running processes.
        self._session.close()

    def __enter__(self) -> "JsonHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
