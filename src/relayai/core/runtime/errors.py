from __future__ import annotations

import re
from dataclasses import dataclass

RETRYABLE_HTTP_STATUSES = frozenset({408, 429})


class RelayAIError(RuntimeError):
    """Base class for every failure the client surfaces to callers."""


class ConfigurationError(RelayAIError):
    """Unknown provider, missing credential or malformed settings. Never retried."""


class TransportError(RelayAIError):
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    HTTP_STATUS = "http_status"
    EMPTY_BODY = "empty_body"
    DECODE_ERROR = "decode_error"

    def __init__(self, kind: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.kind == self.HTTP_STATUS:
            code = self.status_code or 0
            return code in RETRYABLE_HTTP_STATUSES or 500 <= code < 600
        return True


class ExtractionError(RelayAIError):
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"[{provider}] {message}")
        self.provider = provider


class ExhaustionError(RelayAIError):
    def __init__(self, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(f"retries_exhausted after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class CancellationError(RelayAIError):
    """The caller cancelled the request or its deadline passed."""


@dataclass(slots=True)
class ErrorInfo:
    category: str
    component: str
    error_type: str
    message_signature: str
    retryable: bool
    http_status: int | None = None


_SECRET_PATTERNS = (
    re.compile(r"([?&]key=)[^&\s]+", re.IGNORECASE),
    re.compile(r"(bearer\s+)\S+", re.IGNORECASE),
    re.compile(r"\b(sk-)[\w-]+"),
)


def redact_secrets(message: str) -> str:
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(r"\1***", message)
    return message


def _signature(message: str, max_len: int = 180) -> str:
    # digits collapse so "http 502" and "http 503" share one signature
    msg = re.sub(r"\s+", " ", redact_secrets(message).lower())
    return re.sub(r"\d+", "#", msg).strip()[:max_len]


def classify_error(
    exc: BaseException,
    *,
    category: str,
    component: str,
    retry_unexpected: bool = True,
) -> ErrorInfo:
    status = None
    if not isinstance(exc, Exception) or isinstance(exc, (ConfigurationError, CancellationError)):
        retryable = False
    elif isinstance(exc, TransportError):
        retryable = exc.retryable
        status = exc.status_code
    elif isinstance(exc, ExtractionError):
        retryable = True
    else:
        retryable = retry_unexpected

    return ErrorInfo(
        category=category,
        component=component,
        error_type=exc.__class__.__name__,
        message_signature=_signature(str(exc)),
        retryable=retryable,
        http_status=status,
    )


def compact_error_summary(exc: BaseException, max_len: int = 220) -> str:
    label = exc.__class__.__name__
    if isinstance(exc, TransportError):
        label += f"[{exc.kind}" + (f" {exc.status_code}]" if exc.status_code else "]")
    text = re.sub(r"\s+", " ", redact_secrets(str(exc))).strip()
    return f"{label}: {text[:max_len]}"
