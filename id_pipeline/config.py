import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
DEFAULT_MODEL = "mistral-small-latest"


@dataclass
class LLMConfig:
    """Configuration du fournisseur LLM, passée explicitement à la gateway."""
    api_key: Optional[str]
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_ms: int = 30000
    max_tokens: int = 300
    temperature: float = 0.1
    top_p: float = 1.0

    @property
    def timeout_sec(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def load_config(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    max_tokens: Optional[int] = None,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
) -> LLMConfig:
    cfg = LLMConfig(
        api_key=api_key or os.getenv("MISTRAL_API_KEY"),
        base_url=(base_url or os.getenv("MISTRAL_BASE_URL", DEFAULT_BASE_URL)).rstrip("/"),
        model=model or os.getenv("MISTRAL_MODEL", DEFAULT_MODEL),
        timeout_ms=int(timeout_ms or int(os.getenv("LLM_TIMEOUT_MS", "30000"))),
        max_tokens=int(max_tokens or int(os.getenv("LLM_MAX_TOKENS", "300"))),
        temperature=float(temperature if temperature is not None else os.getenv("LLM_TEMPERATURE", "0.1")),
        top_p=float(top_p if top_p is not None else os.getenv("LLM_TOP_P", "1.0")),
    )
    return cfg
