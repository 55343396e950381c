from typing import Any, Dict, Optional

from .types import Usage


# Tarif approximatif Mistral Small, en euros pour 1000 tokens.
COST_PER_1K_TOKENS_EUR = 0.0001


def estimate_cost(usage: Optional[Usage], model: str) -> Optional[Dict[str, Any]]:
    if usage is None:
        return None

    total = usage.total_tokens
    cost = (total / 1000) * COST_PER_1K_TOKENS_EUR
    return {
        "tokens": total,
        "estimatedCost": f"€{cost:.6f}",
        "model": model,
    }
