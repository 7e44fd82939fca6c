from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from relayai.core.config.schema import ClientConfig
from relayai.core.runtime.errors import ConfigurationError, ExtractionError


@dataclass(slots=True)
class GenerationRequest:
    prompt: str
    max_tokens: int = 2000
    temperature: float = 0.7

    @classmethod
    def from_config(cls, prompt: str, cfg: ClientConfig) -> GenerationRequest:
        return cls(prompt=prompt, max_tokens=cfg.max_tokens, temperature=cfg.temperature)


@dataclass(slots=True)
class PreparedRequest:
    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


class ProviderAdapter(ABC):
    name: str
    requires_api_key: bool = False

    @abstractmethod
    def build_request(self, request: GenerationRequest, cfg: ClientConfig) -> PreparedRequest:
        raise NotImplementedError

    @abstractmethod
    def extract_result(self, payload: dict[str, Any]) -> str:
        raise NotImplementedError

    def endpoint(self, cfg: ClientConfig) -> tuple[str, str]:
        """Config field name and value holding the backend address."""
        return "api_url", cfg.api_url

    def validate_config(self, cfg: ClientConfig) -> None:
        if self.requires_api_key and not cfg.resolved_api_key():
            raise ConfigurationError(f"missing api key for provider {self.name}")
        field_name, value = self.endpoint(cfg)
        if not value.strip():
            raise ConfigurationError(f"missing {field_name} for provider {self.name}")
        try:
            url = httpx.URL(value.strip())
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"invalid {field_name} for provider {self.name}: {exc}") from exc
        if url.scheme not in {"http", "https"} or not url.host:
            raise ConfigurationError(
                f"{field_name} for provider {self.name} must be an http(s) url with a host, got {value!r}"
            )

    def _require_text(self, value: Any, where: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ExtractionError(self.name, f"empty or missing text at {where}")
        return value
