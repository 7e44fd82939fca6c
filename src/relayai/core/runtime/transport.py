from __future__ import annotations

from typing import Any

import httpx

from relayai.core.runtime.errors import ConfigurationError, TransportError


class HttpTransport:
    """One JSON POST per call. Retries belong to the caller."""

    def __init__(self, timeout_seconds: float, client: httpx.Client | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout_seconds, connect=timeout_seconds))

    def send(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        merged_headers = {"Content-Type": "application/json", **headers}
        timeout = self.timeout_seconds if timeout is None else min(timeout, self.timeout_seconds)
        try:
            resp = self._client.post(url, json=body, headers=merged_headers, timeout=timeout)
        except (httpx.UnsupportedProtocol, httpx.InvalidURL) as exc:
            raise ConfigurationError(f"invalid endpoint url {_redact(url)!r}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise TransportError(TransportError.TIMEOUT, f"request to {_redact(url)} timed out") from exc
        except httpx.TransportError as exc:
            raise TransportError(
                TransportError.CONNECTION_REFUSED, f"cannot reach {_redact(url)}: {exc}"
            ) from exc

        if not resp.is_success:
            raise TransportError(
                TransportError.HTTP_STATUS,
                f"http {resp.status_code} from {_redact(url)}",
                status_code=resp.status_code,
            )
        if not resp.content or not resp.content.strip():
            raise TransportError(TransportError.EMPTY_BODY, f"empty body from {_redact(url)}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise TransportError(TransportError.DECODE_ERROR, f"invalid json from {_redact(url)}") from exc
        if not isinstance(payload, dict):
            raise TransportError(TransportError.DECODE_ERROR, f"expected a json object from {_redact(url)}")
        return payload

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _redact(url: str) -> str:
    # cloud-generative carries its key in the query string
    return url.split("?", 1)[0]
