from __future__ import annotations

from typing import Any

from relayai.core.config.schema import ClientConfig
from relayai.core.providers.base import GenerationRequest, PreparedRequest, ProviderAdapter
from relayai.core.runtime.errors import ExtractionError


class CloudChatAdapter(ProviderAdapter):
    """OpenAI-style chat completions."""

    name = "cloud-chat"
    requires_api_key = True

    def build_request(self, request: GenerationRequest, cfg: ClientConfig) -> PreparedRequest:
        self.validate_config(cfg)
        payload = {
            "model": cfg.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        headers = {"Authorization": f"Bearer {cfg.resolved_api_key()}"}
        return PreparedRequest(url=cfg.api_url, body=payload, headers=headers)

    def extract_result(self, payload: dict[str, Any]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ExtractionError(self.name, "no choices in response")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise ExtractionError(self.name, "invalid response: message missing")
        return self._require_text(message.get("content"), "choices[0].message.content")
