from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relayai.core.runtime.simulation import SimulationPolicy


class TelemetryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_level: str = "INFO"
    json_logs: bool = True


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: str = "local-inference"

    base_url: str = Field(default="http://localhost:11434", alias="baseUrl")
    api_path: str = Field(default="/api/generate", alias="apiPath")

    api_url: str = Field(default="", alias="apiUrl")
    api_key: str = Field(default="", alias="apiKey", repr=False)
    api_key_env: str | None = Field(default=None, alias="apiKeyEnv")

    model: str = "llama3"
    max_tokens: int = Field(default=2000, gt=0, alias="maxTokens")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    simulation_policy: SimulationPolicy = Field(default=SimulationPolicy.AUTO, alias="simulationPolicy")
    simulation_delay_ms: int = Field(default=2000, ge=0, alias="simulationDelayMs")

    timeout_ms: int = Field(default=300_000, gt=0, alias="timeoutMs")
    max_retry_attempts: int = Field(default=3, ge=1, alias="maxRetryAttempts")
    retry_backoff_delay_ms: int = Field(default=1000, ge=0, alias="retryBackoffDelayMs")
    retry_backoff_cap_ms: int = Field(default=10_000, ge=0, alias="retryBackoffCapMs")
    retry_unexpected_errors: bool = Field(default=True, alias="retryUnexpectedErrors")

    canary_prompt: str = Field(default="Connection test. Reply simply with 'OK'.", alias="canaryPrompt")
    canary_token: str = Field(default="OK", alias="canaryToken")

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("simulation_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def resolved_api_key(self) -> str:
        key = self.api_key.strip()
        if not key and self.api_key_env:
            key = os.getenv(self.api_key_env, "").strip()
        return key

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0
