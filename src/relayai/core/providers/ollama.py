from __future__ import annotations

from typing import Any

from relayai.core.config.schema import ClientConfig
from relayai.core.providers.base import GenerationRequest, PreparedRequest, ProviderAdapter


class LocalInferenceAdapter(ProviderAdapter):
    """Ollama ``/api/generate`` with streaming disabled."""

    name = "local-inference"

    def endpoint(self, cfg: ClientConfig) -> tuple[str, str]:
        return "base_url", cfg.base_url

    def build_request(self, request: GenerationRequest, cfg: ClientConfig) -> PreparedRequest:
        self.validate_config(cfg)
        url = cfg.base_url.rstrip("/") + "/" + cfg.api_path.lstrip("/")
        payload = {
            "model": cfg.model,
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
        }
        return PreparedRequest(url=url, body=payload)

    def extract_result(self, payload: dict[str, Any]) -> str:
        return self._require_text(payload.get("response"), "response")
