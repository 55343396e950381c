from pathlib import Path
from typing import Any, Dict

import json


def _safe_name(name: str) -> str:
    return "".join(c if c.isalnum() or c in ("_", "-", ".") else "_" for c in name)


def write_result_json(out_dir: Path, prefix: str, data: Dict[str, Any]) -> Path:
    """
    Écrit le résultat d'extraction d'un fichier OCR dans `<prefix>_identity.json`.
    Le dossier de sortie est créé au besoin.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{_safe_name(prefix)}_identity.json"
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
