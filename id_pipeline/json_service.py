import json
import logging
from typing import Any, Dict, Optional

from .errors import ErrorKind, ExtractionError


logger = logging.getLogger(__name__)


def _extract_json_object(s: str) -> Optional[str]:
    start = s.find("{")
    if start == -1:
        return None
    end = s.rfind("}")
    # "{" sans "}" fermante : candidat tronqué, laissé à json.loads
    if end < start:
        return s[start:]
    return s[start : end + 1]


def extract_json_object(completion_text: str) -> Dict[str, Any]:
    """
    Isole l'objet JSON contenu dans une complétion libre.

    Le modèle peut ajouter du texte avant ou après le JSON : on prend le
    segment du premier "{" au dernier "}", ou jusqu'à la fin du texte s'il
    n'y a pas de "}" après. Sans "{" : NoJsonFound ; segment illisible :
    InvalidJson. La forme de l'objet n'est pas vérifiée ici, c'est le rôle
    de `normalizer.normalize_record`.
    """
    json_str = _extract_json_object(completion_text or "")
    if json_str is None:
        raise ExtractionError(ErrorKind.NO_JSON_FOUND, "aucun '{' dans la complétion")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ExtractionError(ErrorKind.INVALID_JSON, f"JSON illisible: {e.msg} (pos {e.pos})") from e

    if not isinstance(data, dict):
        raise ExtractionError(ErrorKind.INVALID_JSON, f"objet attendu, reçu {type(data).__name__}")

    logger.debug("JSON extrait: %d clé(s)", len(data))
    return data
