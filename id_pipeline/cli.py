import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .config import load_config
from .orchestrator import build_service
from .types import ExtractionRequest
from .writer import write_result_json


logger = logging.getLogger(__name__)


def find_text_files(input_dir: str) -> List[Path]:
    """Retourne tous les fichiers texte OCR (.txt) du dossier d'entrée, récursivement."""
    root = Path(input_dir).expanduser().resolve()
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".txt")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> None:
    # Charger .env avant toute lecture d'os.getenv (config)
    load_dotenv(find_dotenv(usecwd=True), override=False)

    parser = argparse.ArgumentParser(description="Pipeline: texte OCR → JSON (document d'identité italien).")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", required=False, help="Dossier contenant des fichiers texte OCR (.txt).")
    source.add_argument("--text", required=False, help="Texte OCR à analyser directement (résultat sur stdout).")
    parser.add_argument("--out-root", required=False, default="uploads", help="Dossier de sortie (défaut: uploads)")
    parser.add_argument("--model", required=False, help="Modèle LLM (défaut via env MISTRAL_MODEL)")
    parser.add_argument("--timeout-ms", required=False, type=int, default=None, help="Timeout de l'appel LLM en ms")
    parser.add_argument("--verbose", action="store_true", help="Logs DEBUG")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    cfg = load_config(model=args.model, timeout_ms=args.timeout_ms)
    service = build_service(cfg)

    # Mode 1 : un seul texte passé en argument
    if args.text is not None:
        try:
            result = asyncio.run(service.run(ExtractionRequest(ocr_text=args.text)))
        except KeyboardInterrupt:
            print("Interrompu par l'utilisateur.")
            sys.exit(130)
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        sys.exit(0 if result.success else 1)

    # Mode 2 : dossier de fichiers .txt
    if not args.input:
        print("Erreur: --input ou --text est obligatoire.")
        sys.exit(1)

    files = find_text_files(args.input)
    if not files:
        print("Aucun fichier .txt trouvé.")
        sys.exit(0)

    out_root = Path(args.out_root).expanduser().resolve()
    print(f"{len(files)} fichier(s) .txt détecté(s) → sortie: {out_root}")
    failures = 0
    for i, path in enumerate(files, start=1):
        print(f"\n[{i}/{len(files)}] {path}")
        try:
            text = path.read_text(encoding="utf-8")
            result = asyncio.run(service.run(ExtractionRequest(ocr_text=text)))
        except KeyboardInterrupt:
            print("Interrompu par l'utilisateur.")
            sys.exit(130)
        except (OSError, UnicodeDecodeError) as e:
            print(f"❌ Lecture impossible: {path} → {e}")
            failures += 1
            continue

        out_path = write_result_json(out_root, path.stem, result.to_dict())
        if result.success:
            print(f"✅ {result.fields_extracted}/8 champs → {out_path}")
        else:
            failures += 1
            print(f"❌ {result.error.value}: {result.message}")

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
