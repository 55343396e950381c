from typing import Any, Dict, List, Optional

import pytest

from id_pipeline.config import LLMConfig
from id_pipeline.errors import ExtractionError
from id_pipeline.types import LLMCompletion, Usage


class FakeGateway:
    """Gateway de test : renvoie une complétion fixe ou lève une erreur, et compte les appels."""

    def __init__(self, text: str = "", usage: Optional[Usage] = None, error: Optional[ExtractionError] = None):
        self.text = text
        self.usage = usage
        self.error = error
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> LLMCompletion:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMCompletion(text=self.text, usage=self.usage, model="mistral-small-latest")


def chat_completion_payload(content: Any, usage: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": "cmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "mistral-small-latest",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }
    if usage is not None:
        payload["usage"] = {**usage, "total_tokens": sum(usage.values())}
    return payload


@pytest.fixture
def config() -> LLMConfig:
    return LLMConfig(api_key="test-key", base_url="https://llm.test/v1", timeout_ms=2000)
