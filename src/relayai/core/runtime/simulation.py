from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from enum import Enum


class SimulationPolicy(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    AUTO = "auto"


SIMULATED_ISSUES: tuple[dict, ...] = (
    {
        "issueType": "Compliance",
        "description": (
            "Document analysed in simulation mode. This is a test response used to check "
            "that the system works end to end."
        ),
        "pageNumber": 1,
        "paragraphNumber": 1,
        "suggestion": "For a real analysis, check the AI API connection and disable simulation mode.",
    },
    {
        "issueType": "Structure",
        "description": "Document format not verified in simulation mode.",
        "pageNumber": 1,
        "paragraphNumber": 2,
        "suggestion": "Make sure the document follows the required standards.",
    },
)


def simulated_payload() -> str:
    return json.dumps({"issues": [dict(item) for item in SIMULATED_ISSUES]}, indent=2, ensure_ascii=False)


class FallbackController:
    def __init__(
        self,
        policy: SimulationPolicy,
        *,
        delay_seconds: float = 2.0,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.policy = SimulationPolicy(policy)
        self.delay_seconds = max(0.0, delay_seconds)
        self._sleep = sleep or time.sleep
        self._lock = threading.Lock()
        self._forced = False

    @property
    def forced(self) -> bool:
        with self._lock:
            return self._forced

    def should_simulate(self) -> bool:
        if self.policy == SimulationPolicy.ENABLED:
            return True
        return self.policy == SimulationPolicy.AUTO and self.forced

    def can_latch(self) -> bool:
        return self.policy == SimulationPolicy.AUTO

    def force(self) -> None:
        with self._lock:
            self._forced = True

    def reset(self) -> bool:
        """Clear the latch. Returns whether it was set."""
        with self._lock:
            was_forced = self._forced
            self._forced = False
            return was_forced

    def simulated_response(self, prompt: str, *, sleep: Callable[[float], None] | None = None) -> str:
        _ = prompt
        if self.delay_seconds:
            (sleep or self._sleep)(self.delay_seconds)
        return simulated_payload()
