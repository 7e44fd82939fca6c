from __future__ import annotations

import uuid
from collections.abc import Callable

from relayai.core.config.schema import ClientConfig
from relayai.core.providers.base import GenerationRequest, ProviderAdapter
from relayai.core.providers.health import ClientStatus
from relayai.core.providers.registry import build_adapter
from relayai.core.runtime.cancellation import CancelToken
from relayai.core.runtime.errors import CancellationError, ErrorInfo, ExhaustionError, compact_error_summary
from relayai.core.runtime.retries import RetryPolicy, run_with_retry_sync
from relayai.core.runtime.simulation import FallbackController
from relayai.core.runtime.transport import HttpTransport
from relayai.core.telemetry.logging import get_logger
from relayai.core.telemetry.tracing import TraceContext, trace_event

_MIN_ATTEMPT_TIMEOUT = 0.001


class AIDispatcher:
    """Public entry point: one configured provider, retries, and simulation fallback.

    The adapter is chosen once from ``cfg.provider``. Each dispatcher owns its
    own forced-simulation latch, so independently configured instances never
    affect each other.
    """

    def __init__(
        self,
        cfg: ClientConfig,
        *,
        transport: HttpTransport | None = None,
        adapter: ProviderAdapter | None = None,
        sleep: Callable[[float], None] | None = None,
        logger=None,
    ) -> None:
        self.cfg = cfg
        self.adapter = adapter or build_adapter(cfg.provider)
        self.transport = transport or HttpTransport(cfg.timeout_seconds)
        self.retry_policy = RetryPolicy(
            max_attempts=cfg.max_retry_attempts,
            base_backoff_seconds=cfg.retry_backoff_delay_ms / 1000.0,
            cap_seconds=cfg.retry_backoff_cap_ms / 1000.0,
            retry_unexpected=cfg.retry_unexpected_errors,
        )
        self.fallback = FallbackController(
            cfg.simulation_policy,
            delay_seconds=cfg.simulation_delay_ms / 1000.0,
            sleep=sleep,
        )
        self._sleep = sleep
        self._last_connection_error: str | None = None
        self.logger = logger or get_logger("relayai.dispatcher")

    @property
    def provider(self) -> str:
        return self.adapter.name

    @property
    def forced_simulation(self) -> bool:
        return self.fallback.forced

    def _trace(self, request_id: str, event: str, status: str, extra: dict | None = None) -> None:
        ctx = TraceContext(request_id=request_id, provider=self.provider, model=self.cfg.model, phase="dispatch")
        trace_event(self.logger, ctx, event, status, extra)

    def _sleeper(self, cancel: CancelToken | None) -> Callable[[float], None] | None:
        if cancel is None:
            return self._sleep
        if self._sleep is None:
            return cancel.sleep

        def _sleep(seconds: float) -> None:
            cancel.raise_if_cancelled()
            self._sleep(seconds)
            cancel.raise_if_cancelled()

        return _sleep

    def _attempt_timeout(self, cancel: CancelToken | None) -> float:
        timeout = self.cfg.timeout_seconds
        remaining = cancel.remaining() if cancel is not None else None
        if remaining is None:
            return timeout
        return min(timeout, max(remaining, _MIN_ATTEMPT_TIMEOUT))

    def send_request(self, prompt: str, *, cancel: CancelToken | None = None) -> str:
        request_id = uuid.uuid4().hex[:12]
        self._trace(
            request_id,
            "ai_request",
            "start",
            {"policy": self.fallback.policy.value, "prompt_preview": prompt[:80]},
        )
        sleeper = self._sleeper(cancel)

        if self.fallback.should_simulate():
            self._trace(request_id, "ai_simulation", "simulated", {"forced": self.fallback.forced})
            return self.fallback.simulated_response(prompt, sleep=sleeper)

        self.adapter.validate_config(self.cfg)
        request = GenerationRequest.from_config(prompt, self.cfg)

        def _attempt() -> str:
            prepared = self.adapter.build_request(request, self.cfg)
            payload = self.transport.send(
                prepared.url, prepared.body, prepared.headers, timeout=self._attempt_timeout(cancel)
            )
            return self.adapter.extract_result(payload)

        def _on_attempt(attempt: int, status: str, info: ErrorInfo | None) -> None:
            extra = {"attempt": attempt, "max_attempts": self.retry_policy.max_attempts}
            if info is not None:
                extra.update(
                    error_type=info.error_type,
                    error=info.message_signature,
                    retryable=info.retryable,
                    http_status=info.http_status,
                )
            self._trace(request_id, "ai_attempt", status, extra)

        def _on_backoff(attempt: int, delay: float) -> None:
            self._trace(request_id, "ai_backoff", "waiting", {"attempt": attempt, "delay_ms": round(delay * 1000)})

        try:
            result = run_with_retry_sync(
                _attempt,
                policy=self.retry_policy,
                category="provider",
                component=self.provider,
                cancel=cancel,
                on_attempt=_on_attempt,
                on_backoff=_on_backoff,
                sleep=sleeper,
            )
        except ExhaustionError as exc:
            if self.fallback.can_latch():
                # latch only once the simulated answer is actually delivered
                text = self.fallback.simulated_response(prompt, sleep=sleeper)
                self.fallback.force()
                self._trace(
                    request_id,
                    "ai_simulation_forced",
                    "fallback",
                    {"attempts": exc.attempts, "last_error": compact_error_summary(exc.last_error or exc)},
                )
                return text
            self._trace(request_id, "ai_request", "exhausted", {"attempts": exc.attempts})
            raise
        except CancellationError:
            self._trace(request_id, "ai_request", "cancelled")
            raise

        self._trace(request_id, "ai_request", "ok", {"chars": len(result)})
        return result

    def test_connection(self, *, cancel: CancelToken | None = None) -> bool:
        try:
            response = self.send_request(self.cfg.canary_prompt, cancel=cancel)
        except Exception as exc:  # noqa: BLE001
            self._last_connection_error = compact_error_summary(exc)
            self.logger.error("ai_connection_test_failed", provider=self.provider, error=self._last_connection_error)
            return False
        ok = self.cfg.canary_token in response
        self._last_connection_error = None if ok else "canary token missing from response"
        return ok

    def get_status(self) -> ClientStatus:
        connected = self.test_connection()
        return ClientStatus(
            provider=self.provider,
            model=self.cfg.model,
            simulation_policy=self.fallback.policy,
            forced_simulation=self.fallback.forced,
            connected=connected,
            error=None if connected else self._last_connection_error,
        )

    def reset_simulation(self) -> None:
        was_forced = self.fallback.reset()
        self.logger.info("ai_simulation_reset", provider=self.provider, was_forced=was_forced)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> AIDispatcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
