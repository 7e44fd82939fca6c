from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
)

from relayai.core.runtime.cancellation import CancelToken
from relayai.core.runtime.errors import ErrorInfo, ExhaustionError, classify_error

T = TypeVar("T")


@dataclass(slots=True)
class RetryPolicy:
    max_attempts: int = 3
    base_backoff_seconds: float = 1.0
    cap_seconds: float = 10.0
    retry_unexpected: bool = True


def backoff_delay(policy: RetryPolicy, attempt: int) -> float:
    """Delay slept after failed attempt ``attempt`` (1-based)."""
    if attempt <= 0:
        return 0.0
    delay = policy.base_backoff_seconds * (2 ** (attempt - 1))
    return min(delay, policy.cap_seconds)


def run_with_retry_sync(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy,
    category: str,
    component: str,
    cancel: CancelToken | None = None,
    on_attempt: Callable[[int, str, ErrorInfo | None], None] | None = None,
    on_backoff: Callable[[int, float], None] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T:
    attempts = max(1, policy.max_attempts)
    if sleep is None:
        sleep = cancel.sleep if cancel is not None else time.sleep

    def _is_retryable(exc: BaseException) -> bool:
        info = classify_error(exc, category=category, component=component, retry_unexpected=policy.retry_unexpected)
        return info.retryable

    def _before_sleep(state: RetryCallState) -> None:
        if on_backoff and state.next_action is not None:
            on_backoff(state.attempt_number, state.next_action.sleep)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=lambda state: backoff_delay(policy, state.attempt_number),
        retry=retry_if_exception_type(Exception) & retry_if_exception(_is_retryable),
        sleep=sleep,
        before_sleep=_before_sleep,
    )

    try:
        for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                if cancel is not None:
                    cancel.raise_if_cancelled()
                try:
                    value = fn()
                except Exception as exc:
                    if on_attempt:
                        info = classify_error(
                            exc, category=category, component=component, retry_unexpected=policy.retry_unexpected
                        )
                        on_attempt(number, "error", info)
                    raise
                if on_attempt:
                    on_attempt(number, "ok", None)
                return value
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        raise ExhaustionError(attempts, last_error) from last_error
    raise ExhaustionError(attempts, None)
