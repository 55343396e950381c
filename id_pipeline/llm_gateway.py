import logging
import time
from typing import Any, Optional

import httpx
from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from .config import LLMConfig
from .errors import ErrorKind, ExtractionError
from .types import LLMCompletion, Usage


logger = logging.getLogger(__name__)


def _status_error_kind(status_code: int) -> ErrorKind:
    if status_code == 401:
        return ErrorKind.AUTH_ERROR
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.SERVICE_UNAVAILABLE
    return ErrorKind.SERVICE_ERROR


def _completion_text(resp: Any) -> Optional[str]:
    """Lit choices[0].message.content sans faire confiance à la forme de la réponse."""
    choices = getattr(resp, "choices", None)
    if not isinstance(choices, list) or not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        return None
    return content


def _completion_usage(resp: Any) -> Optional[Usage]:
    usage = getattr(resp, "usage", None)
    if usage is None:
        return None
    try:
        return Usage(
            prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
        )
    except (TypeError, ValueError):
        # usage est une métadonnée optionnelle : une valeur illisible vaut absence
        logger.debug("Usage LLM ignoré: %r", usage)
        return None


class LLMGateway:
    """
    Appel unique au endpoint chat/completions (Mistral, compatible OpenAI).

    Chaque échec est converti en `ExtractionError` typée et remonté tout de
    suite : aucune relance n'est faite ici (`max_retries=0`). Un client est
    créé par appel, rien n'est partagé entre requêtes.
    """

    def __init__(self, config: LLMConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def _client(self) -> AsyncOpenAI:
        http_client = httpx.AsyncClient(transport=self._transport) if self._transport is not None else None
        return AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            timeout=self.config.timeout_sec,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, prompt: str) -> LLMCompletion:
        if not self.config.is_configured:
            raise ExtractionError(ErrorKind.UNCONFIGURED, "MISTRAL_API_KEY non défini")

        logger.info("Appel LLM en cours (model=%s, prompt=%d caractères)", self.config.model, len(prompt))
        t0 = time.time()

        try:
            async with self._client() as client:
                resp = await client.chat.completions.create(
                    model=self.config.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                    top_p=self.config.top_p,
                )
        # APITimeoutError hérite de APIConnectionError : l'ordre compte
        except APITimeoutError as e:
            raise ExtractionError(ErrorKind.TIMEOUT, f"pas de réponse après {self.config.timeout_ms} ms") from e
        except APIConnectionError as e:
            raise ExtractionError(ErrorKind.NETWORK_ERROR, str(e)) from e
        except AuthenticationError as e:
            logger.error("Erreur LLM: HTTP %s", e.status_code)
            raise ExtractionError(ErrorKind.AUTH_ERROR, f"HTTP {e.status_code}") from e
        except RateLimitError as e:
            logger.warning("Erreur LLM: HTTP %s", e.status_code)
            raise ExtractionError(ErrorKind.RATE_LIMITED, f"HTTP {e.status_code}") from e
        except APIStatusError as e:
            logger.error("Erreur LLM: HTTP %s", e.status_code)
            raise ExtractionError(_status_error_kind(e.status_code), f"HTTP {e.status_code}") from e
        except APIResponseValidationError as e:
            raise ExtractionError(ErrorKind.MALFORMED_RESPONSE, str(e)) from e
        # corps 200 déclaré JSON mais illisible (json.JSONDecodeError)
        except ValueError as e:
            raise ExtractionError(ErrorKind.MALFORMED_RESPONSE, f"corps de réponse illisible: {e}") from e

        text = _completion_text(resp)
        if text is None:
            raise ExtractionError(ErrorKind.MALFORMED_RESPONSE, "choices[0].message.content absent")

        usage = _completion_usage(resp)
        logger.info(
            "Réponse LLM reçue en %.2fs (%d caractères, %s tokens)",
            time.time() - t0,
            len(text),
            usage.total_tokens if usage else "?",
        )
        return LLMCompletion(text=text, usage=usage, model=getattr(resp, "model", None) or self.config.model)
