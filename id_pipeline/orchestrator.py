import logging
import time
from typing import Any, Optional, Protocol

from .config import LLMConfig, load_config
from .cost import estimate_cost
from .errors import ErrorKind, ExtractionError, message_for
from .json_service import extract_json_object
from .llm_gateway import LLMGateway
from .normalizer import count_fields, normalize_record
from .prompt import build_prompt
from .types import MAX_OCR_CHARS, MIN_OCR_CHARS, ExtractionRequest, ExtractionResult, LLMCompletion


logger = logging.getLogger(__name__)


class CompletionGateway(Protocol):
    async def complete(self, prompt: str) -> LLMCompletion:
        ...


def validate_request(request: ExtractionRequest) -> str:
    text: Any = request.ocr_text
    if not isinstance(text, str):
        raise ExtractionError(ErrorKind.INVALID_INPUT, f"texte OCR de type {type(text).__name__}")
    length = len(text.strip())
    if length < MIN_OCR_CHARS or length > MAX_OCR_CHARS:
        raise ExtractionError(
            ErrorKind.INVALID_INPUT,
            f"longueur {length} hors bornes [{MIN_OCR_CHARS}, {MAX_OCR_CHARS}]",
        )
    return text


def _elapsed_ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000))


class ExtractionService:
    """
    Orchestrateur : validation → prompt → LLM → JSON → normalisation.

    Pipeline linéaire : la première étape en échec termine la requête, sans
    relance ni résultat partiel. `run` renvoie toujours un ExtractionResult,
    les erreurs typées y sont converties.
    """

    def __init__(self, gateway: CompletionGateway, model: str = ""):
        self.gateway = gateway
        self.model = model

    async def run(self, request: ExtractionRequest) -> ExtractionResult:
        t0 = time.perf_counter()
        completion: Optional[LLMCompletion] = None

        try:
            # 1) Validation, avant tout appel externe
            text = validate_request(request)

            # 2) Prompt
            prompt = build_prompt(text)

            # 3) Appel LLM
            completion = await self.gateway.complete(prompt)

            # 4) Extraction du JSON
            raw = extract_json_object(completion.text)
        except ExtractionError as e:
            logger.error("Échec extraction [%s] après %d ms: %s", e.kind.value, _elapsed_ms(t0), e.detail)
            if completion is not None:
                logger.debug("Complétion reçue: %r", completion.text)
            return ExtractionResult(
                success=False,
                error=e.kind,
                message=message_for(e.kind),
                processing_time_ms=_elapsed_ms(t0),
            )

        # 5) Normalisation (ne peut pas échouer)
        record = normalize_record(raw)
        fields = count_fields(record)

        # 6) Résultat
        elapsed = _elapsed_ms(t0)
        model = completion.model or self.model
        logger.info("Extraction terminée: %d/%d champs en %d ms", fields, len(record), elapsed)
        return ExtractionResult(
            success=True,
            data=record,
            fields_extracted=fields,
            processing_time_ms=elapsed,
            usage=completion.usage,
            cost=estimate_cost(completion.usage, model),
        )


def build_service(config: Optional[LLMConfig] = None) -> ExtractionService:
    cfg = config or load_config()
    return ExtractionService(LLMGateway(cfg), model=cfg.model)


async def run_extraction(ocr_text: str, config: Optional[LLMConfig] = None) -> ExtractionResult:
    """Point d'entrée unique exposé à la couche HTTP / CLI."""
    service = build_service(config)
    return await service.run(ExtractionRequest(ocr_text=ocr_text))
