import json
from typing import List, Tuple

from .types import CANONICAL_FIELDS


# Étiquettes bilingues (IT/EN) rencontrées sur les documents → champ cible.
LABEL_MAPPING: List[Tuple[str, str]] = [
    ("NOME|NAME|GIVEN_NAME|GIVEN NAMES", "nome"),
    ("COGNOME|SURNAME|FAMILY_NAME|LAST NAME", "cognome"),
    ("DATA DI NASCITA|NATO IL|DATE OF BIRTH|BIRTH_DATE", "dataNascita"),
    ("LUOGO DI NASCITA|NATO A|PLACE OF BIRTH|BIRTH_PLACE", "luogoNascita"),
    ("CODICE FISCALE|COD. FISCALE|C.F.|FISCAL CODE|TAX CODE", "codiceFiscale"),
    ("NUMERO DOCUMENTO|N. DOCUMENTO|CARTA N.|DOCUMENT NO|DOCUMENT_NUMBER", "numeroDocumento"),
    ("DATA DI RILASCIO|EMISSIONE|RILASCIATA IL|DATE OF ISSUE|ISSUING_DATE", "dataRilascio"),
    ("SCADENZA|VALIDA FINO AL|DATE OF EXPIRY|EXPIRY", "dataScadenza"),
]

# Règles appliquées dans l'ordre aux éléments sans étiquette.
DISAMBIGUATION_RULES: List[str] = [
    "Un token isolato composto solo da lettere che sembra un nome proprio è candidato per nome o cognome "
    "(nei documenti italiani il cognome precede di solito il nome).",
    "Un token nel formato DD/MM/YYYY (o DD-MM-YYYY, DD.MM.YYYY) è candidato per un campo data: "
    "la data più vecchia è di solito la data di nascita, la più recente la scadenza, quella intermedia il rilascio.",
    "Una sequenza di 16 caratteri alfanumerici (es. RSSMRA85C15F205X) è il codice fiscale.",
    "Una sequenza che rispetta il pattern [A-Z]{2}\\d{6,} (es. CA00000AA, AX1234567) è il numero del documento.",
    "Se un token resta ambiguo dopo queste regole, lascia il campo vuoto.",
]


def _json_skeleton() -> str:
    return json.dumps({field: "" for field in CANONICAL_FIELDS}, ensure_ascii=False, indent=4)


def build_prompt(ocr_text: str) -> str:
    """
    Construit le prompt d'extraction pour un texte OCR de document d'identité italien.

    Fonction pure : même texte en entrée, même prompt en sortie. Le texte OCR
    est inséré tel quel (pas de formatage, les accolades éventuelles restent
    intactes).
    """
    parts: List[str] = []
    parts.append(
        "Analizza questo testo estratto da un documento di identità italiano "
        "(carta d'identità, patente o passaporto) e restituisci SOLO un oggetto JSON valido con questi campi:"
    )
    parts.append("\n" + _json_skeleton() + "\n")

    parts.append("## MAPPATURA ETICHETTE (italiano / inglese → campo)")
    for labels, field in LABEL_MAPPING:
        parts.append(f"- {labels} → {field}")

    parts.append("\n## TOKEN SENZA ETICHETTA (applica le regole in ordine)")
    for idx, rule in enumerate(DISAMBIGUATION_RULES, start=1):
        parts.append(f"{idx}. {rule}")

    parts.append(
        "\n## REGOLE\n"
        "- Se un campo non è presente nel testo, lascialo vuoto \"\".\n"
        "- Non inventare MAI valori che non compaiono nel testo.\n"
        "- Le date in formato DD/MM/YYYY o DD-MM-YYYY.\n"
        "- Il codice fiscale deve essere di 16 caratteri.\n"
        "- Usa solo le chiavi indicate sopra, senza aggiungerne altre.\n"
        "- Rispondi SOLO con il JSON, senza spiegazioni né blocchi ```."
    )

    parts.append("\nTesto da analizzare:")
    parts.append(ocr_text)
    parts.append("\nJSON:")

    return "\n".join(parts)
