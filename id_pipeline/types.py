from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import ErrorKind


# Schéma canonique : les huit clés, dans l'ordre exposé à la couche HTTP.
CANONICAL_FIELDS: List[str] = [
    "nome",
    "cognome",
    "dataNascita",
    "luogoNascita",
    "codiceFiscale",
    "numeroDocumento",
    "dataRilascio",
    "dataScadenza",
]

MIN_OCR_CHARS = 5
MAX_OCR_CHARS = 15000


@dataclass
class ExtractionRequest:
    """Texte OCR brut reçu pour une extraction."""
    ocr_text: str


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
        }


@dataclass
class LLMCompletion:
    """Texte renvoyé par le modèle, avec l'usage éventuellement déclaré."""
    text: str
    usage: Optional[Usage] = None
    model: str = ""


@dataclass
class ExtractionResult:
    success: bool
    data: Optional[Dict[str, str]] = None
    fields_extracted: Optional[int] = None
    processing_time_ms: Optional[int] = None
    usage: Optional[Usage] = None
    cost: Optional[Dict[str, Any]] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Forme JSON (camelCase) renvoyée à l'appelant ; les champs absents sont omis."""
        out: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = dict(self.data)
        if self.fields_extracted is not None:
            out["fieldsExtracted"] = self.fields_extracted
        if self.processing_time_ms is not None:
            out["processingTimeMs"] = self.processing_time_ms
        if self.usage is not None:
            out["usage"] = self.usage.to_dict()
        if self.cost is not None:
            out["cost"] = self.cost
        if self.error is not None:
            out["error"] = self.error.value
        if self.message is not None:
            out["message"] = self.message
        return out
