from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    UNCONFIGURED = "Unconfigured"
    AUTH_ERROR = "AuthError"
    RATE_LIMITED = "RateLimited"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SERVICE_ERROR = "ServiceError"
    NETWORK_ERROR = "NetworkError"
    TIMEOUT = "Timeout"
    MALFORMED_RESPONSE = "MalformedResponse"
    NO_JSON_FOUND = "NoJsonFound"
    INVALID_JSON = "InvalidJson"


# Messages destinés à l'utilisateur final (jamais de texte OCR ni de clé API).
ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_INPUT: "Testo OCR mancante o non valido (min 5, max 15000 caratteri)",
    ErrorKind.UNCONFIGURED: "Servizio di analisi non configurato",
    ErrorKind.AUTH_ERROR: "Errore di autenticazione con il servizio AI",
    ErrorKind.RATE_LIMITED: "Rate limit raggiunto. Riprova più tardi.",
    ErrorKind.SERVICE_UNAVAILABLE: "Servizio AI temporaneamente non disponibile",
    ErrorKind.SERVICE_ERROR: "Errore del servizio AI",
    ErrorKind.NETWORK_ERROR: "Impossibile contattare il servizio AI",
    ErrorKind.TIMEOUT: "Il servizio AI non ha risposto in tempo",
    ErrorKind.MALFORMED_RESPONSE: "Risposta del servizio AI incompleta",
    ErrorKind.NO_JSON_FOUND: "Formato risposta non valido: nessun JSON trovato",
    ErrorKind.INVALID_JSON: "Formato risposta non valido: JSON non interpretabile",
}

# Table indicative pour la couche HTTP (hors du cœur).
HTTP_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.TIMEOUT: 504,
}


def message_for(kind: ErrorKind) -> str:
    return ERROR_MESSAGES[kind]


def http_status_for(kind: ErrorKind) -> int:
    return HTTP_STATUS.get(kind, 500)


class ExtractionError(RuntimeError):
    """Erreur typée levée par une étape de la pipeline d'extraction.

    `detail` est réservé aux logs serveur ; seul le message associé au
    `kind` est renvoyé à l'appelant.
    """

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @property
    def message(self) -> str:
        return message_for(self.kind)
