from __future__ import annotations

from relayai.core.providers.base import ProviderAdapter
from relayai.core.providers.gemini import CloudGenerativeAdapter
from relayai.core.providers.ollama import LocalInferenceAdapter
from relayai.core.providers.openai_compatible import CloudChatAdapter
from relayai.core.runtime.errors import ConfigurationError

CLOUD_CHAT = "cloud-chat"
CLOUD_GENERATIVE = "cloud-generative"
LOCAL_INFERENCE = "local-inference"

_ADAPTERS: dict[str, type[ProviderAdapter]] = {
    CLOUD_CHAT: CloudChatAdapter,
    CLOUD_GENERATIVE: CloudGenerativeAdapter,
    LOCAL_INFERENCE: LocalInferenceAdapter,
}

# Names used by older deployments of the client.
_ALIASES = {
    "openai": CLOUD_CHAT,
    "gemini": CLOUD_GENERATIVE,
    "ollama": LOCAL_INFERENCE,
}


def canonical_provider(name: str) -> str:
    key = (name or "").strip().lower()
    key = _ALIASES.get(key, key)
    if key not in _ADAPTERS:
        raise ConfigurationError(f"unknown AI provider: {name!r}")
    return key


def build_adapter(name: str) -> ProviderAdapter:
    return _ADAPTERS[canonical_provider(name)]()


def known_providers() -> list[str]:
    return sorted(_ADAPTERS.keys())
