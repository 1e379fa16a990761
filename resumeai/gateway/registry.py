"""Provider catalogue and one-time construction of the provider list.

Provider configs are built once at process start from Settings and then
shared read-only. ProviderRegistry is the latch: the first ``initialize``
builds the gateway, later calls return the same object.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from resumeai.core.config import Settings
from resumeai.gateway.errors import ConfigurationError
from resumeai.gateway.gateway import LlmGateway
from resumeai.gateway.types import AuthPlacement, ProtocolFamily, ProviderConfig, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CatalogEntry:
    family: ProtocolFamily
    endpoint: str
    model: str
    auth_placement: AuthPlacement = AuthPlacement.HEADER
    supports_structured_output: bool = False
    default_temperature: float = 0.3
    default_max_tokens: int = 4000


PROVIDER_CATALOG: dict[str, _CatalogEntry] = {
    "groq": _CatalogEntry(
        family=ProtocolFamily.CHAT_COMPLETION,
        endpoint="https://api.groq.com/openai/v1/chat/completions",
        model="llama-3.3-70b-versatile",
        supports_structured_output=True,
    ),
    "gemini": _CatalogEntry(
        family=ProtocolFamily.CONTENT_GENERATION,
        endpoint="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        model="gemini-2.0-flash",
        auth_placement=AuthPlacement.QUERY,
        supports_structured_output=True,
    ),
    "baseten": _CatalogEntry(
        family=ProtocolFamily.CHAT_COMPLETION,
        endpoint="https://inference.baseten.co/v1/chat/completions",
        model="openai/gpt-oss-120b",
        default_temperature=1.0,
        default_max_tokens=1000,
    ),
    "openrouter": _CatalogEntry(
        family=ProtocolFamily.CHAT_COMPLETION,
        endpoint="https://openrouter.ai/api/v1/chat/completions",
        model="openai/gpt-4o-mini",
    ),
}


def _credential(settings: Settings, provider_id: str) -> str:
    return getattr(settings, f"{provider_id}_api_key", "") or ""


def _extra_headers(settings: Settings, provider_id: str) -> tuple[tuple[str, str], ...]:
    if provider_id == "openrouter":
        return (("HTTP-Referer", settings.openrouter_referer), ("X-Title", settings.openrouter_title))
    return ()


def build_provider_configs(settings: Settings) -> tuple[ProviderConfig, ...]:
    """Build the ordered provider list from settings.

    Only providers with a credential are included. Unknown names in
    PROVIDER_ORDER are a configuration error.
    """
    unknown = [p for p in settings.provider_order_list if p not in PROVIDER_CATALOG]
    if unknown:
        raise ConfigurationError(f"Unknown provider(s) in PROVIDER_ORDER: {', '.join(unknown)}")

    retry_ids = set(settings.retry_on_rate_limit_list)
    configs: list[ProviderConfig] = []
    seen: set[str] = set()

    for provider_id in settings.provider_order_list:
        if provider_id in seen:
            continue
        seen.add(provider_id)

        api_key = _credential(settings, provider_id)
        if not api_key:
            logger.info("Provider %s has no API key, not configured", provider_id)
            continue

        entry = PROVIDER_CATALOG[provider_id]
        model = getattr(settings, f"{provider_id}_model", "") or entry.model
        retry = RetryPolicy(max_retries=1, base_delay=settings.retry_base_delay) if provider_id in retry_ids else RetryPolicy()

        configs.append(
            ProviderConfig(
                provider_id=provider_id,
                family=entry.family,
                endpoint=entry.endpoint,
                model=model,
                api_key=api_key,
                auth_placement=entry.auth_placement,
                supports_structured_output=entry.supports_structured_output,
                default_temperature=entry.default_temperature,
                default_max_tokens=entry.default_max_tokens,
                extra_headers=_extra_headers(settings, provider_id),
                retry=retry,
            )
        )

    return tuple(configs)


class ProviderRegistry:
    """Builds the provider configuration and gateway exactly once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._gateway: LlmGateway | None = None

    @property
    def initialized(self) -> bool:
        return self._gateway is not None

    def initialize(self, settings: Settings) -> LlmGateway:
        with self._lock:
            if self._gateway is None:
                providers = build_provider_configs(settings)
                self._gateway = LlmGateway(
                    providers,
                    per_attempt_timeout=settings.provider_timeout_seconds,
                    overall_deadline=settings.overall_deadline_seconds,
                    continue_on_unparsable=settings.continue_on_unparsable,
                )
                logger.info(
                    "Provider chain initialized: %s",
                    " → ".join(p.provider_id for p in providers) or "(none)",
                )
            return self._gateway

    @property
    def gateway(self) -> LlmGateway:
        if self._gateway is None:
            raise ConfigurationError("Provider registry used before initialization")
        return self._gateway
