from __future__ import annotations

from typing import Any

import httpx

from relayai.core.config.schema import ClientConfig
from relayai.core.providers.base import GenerationRequest, PreparedRequest, ProviderAdapter
from relayai.core.runtime.errors import ExtractionError


class CloudGenerativeAdapter(ProviderAdapter):
    """Gemini-style generateContent. The key travels as the ``key`` query parameter."""

    name = "cloud-generative"
    requires_api_key = True

    def build_request(self, request: GenerationRequest, cfg: ClientConfig) -> PreparedRequest:
        self.validate_config(cfg)
        url = str(httpx.URL(cfg.api_url).copy_merge_params({"key": cfg.resolved_api_key()}))
        payload = {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
            },
        }
        return PreparedRequest(url=url, body=payload)

    def extract_result(self, payload: dict[str, Any]) -> str:
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise ExtractionError(self.name, "no candidates in response")
        try:
            text = candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExtractionError(self.name, f"malformed candidate structure: {exc!r}") from exc
        return self._require_text(text, "candidates[0].content.parts[0].text")
