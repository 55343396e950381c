from typing import Any, Dict

from .types import CANONICAL_FIELDS


UPPERCASE_FIELDS = {"codiceFiscale"}


def _coerce(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    # bool est une sous-classe de int : on l'exclut explicitement
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value).strip()
    return ""


def normalize_record(raw: Any) -> Dict[str, str]:
    """
    Ramène une sortie de modèle quelconque au schéma canonique.

    Ne lève jamais d'exception : clé absente, valeur nulle ou non convertible
    donne "". Les clés inconnues sont ignorées ; le résultat contient toujours
    exactement les huit clés de CANONICAL_FIELDS.
    """
    source: Dict[str, Any] = raw if isinstance(raw, dict) else {}

    record: Dict[str, str] = {}
    for field in CANONICAL_FIELDS:
        value = _coerce(source.get(field))
        if field in UPPERCASE_FIELDS:
            value = value.upper()
        record[field] = value
    return record


def count_fields(record: Dict[str, str]) -> int:
    """Nombre de champs non vides (indicateur de suivi, pas de validation)."""
    return sum(1 for field in CANONICAL_FIELDS if record.get(field))
