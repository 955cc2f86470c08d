"""Traiter un lot de rapports mensuels: nom de fichier, texte, indicateurs.

Pour chaque fichier, le nom est analysé (commune, mois, année), le texte est
extrait du PDF, puis les indicateurs sont extraits du texte. Chaque fichier
donne exactement une entrée, dans l'ordre des fichiers en entrée: soit un
succès (toutes les données, sans erreur), soit un échec ("source_file" et
"error" seulement). L'échec d'un fichier n'interrompt jamais le lot.
"""

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import Callable, Iterable

import pandas as pd

from ond_delinquance.domain_knowledge.nom_fichier import parse_filename
from ond_delinquance.errors import UnreadablePdfError
from ond_delinquance.preprocess.extract_native_text import (
    BACKENDS,
    extract_native_text,
)
from ond_delinquance.process.export_data import DTYPE_DATA, records_to_dataframe
from ond_delinquance.process.extract_indicators import (
    build_indicator_records,
    extract_indicators,
)
from ond_delinquance.quality.validate_parses import (
    check_indicateurs,
    report_missing_indicators,
)
from ond_delinquance.utils.str_date import MOIS_LABELS
from ond_delinquance.utils.text_utils import fix_encoding

# motif glob pour les fichiers PDF
PAT_PDF = "*.[Pp][Dd][Ff]"


def make_error(filename: str, msg: str) -> dict:
    """Entrée d'échec pour un fichier."""
    return {"source_file": filename, "error": msg}


def is_success(record: dict) -> bool:
    """True si l'entrée est un succès (pas d'erreur).

    Les entrées relues d'un CSV ont une erreur manquante (NA) plutôt que None.
    """
    return pd.isna(record.get("error"))


def period_key(record: dict) -> tuple[str, int, int]:
    """Identité d'une période importée: (commune en minuscules, mois, année)."""
    return (record["commune_key"], record["month"], record["year"])


def parse_report(
    filename: str,
    pdf_bytes: bytes,
    extract_text: Callable[..., str] = extract_native_text,
) -> dict:
    """Analyser un rapport mensuel: nom de fichier et contenu.

    Parameters
    ----------
    filename: str
        Nom du fichier, ex: "06_Saint_Alban_juin2024.pdf".
    pdf_bytes: bytes
        Contenu du fichier PDF.
    extract_text: Callable
        Fonction d'extraction du texte, appelée avec `(pdf_bytes, filename=...)`,
        qui lève `UnreadablePdfError` si le fichier est illisible.

    Returns
    -------
    record: dict
        En cas de succès: "commune", "commune_key", "month", "month_label",
        "year", "population", "surface", "density", "indicators",
        "source_file". En cas d'échec: "source_file" et "error".
    """
    # les noms de fichiers transmis par un formulaire peuvent être mal décodés
    filename = fix_encoding(filename)
    # 1. nom du fichier: commune, mois, année
    parsed = parse_filename(filename)
    if "error" in parsed:
        return make_error(filename, parsed["error"])
    # 2. texte du PDF
    try:
        raw_text = extract_text(pdf_bytes, filename=filename)
    except UnreadablePdfError as exc:
        logging.error(f"{filename}: {exc}")
        return make_error(filename, str(exc))
    # 3. indicateurs
    raw_ind = extract_indicators(raw_text)
    indicators = build_indicator_records(raw_ind)
    return {
        "commune": parsed["commune"],
        "commune_key": parsed["commune"].lower(),
        "month": parsed["month"],
        "month_label": parsed["month_label"],
        "year": parsed["year"],
        "population": raw_ind["population"],
        "surface": raw_ind["surface"],
        "density": raw_ind["densite"],
        "indicators": indicators,
        "source_file": filename,
    }


def process_files(
    files: Iterable[tuple[str, bytes]],
    existing: Iterable[dict] = (),
    extract_text: Callable[..., str] = extract_native_text,
) -> list[dict]:
    """Traiter un lot de fichiers, en isolant les échecs de chaque fichier.

    Parameters
    ----------
    files: Iterable[tuple[str, bytes]]
        Couples (nom du fichier, contenu). Les fichiers dont le nom ne se
        termine pas par ".pdf" sont ignorés.
    existing: Iterable[dict]
        Entrées déjà importées ; une période (commune, mois, année) déjà
        importée avec succès est refusée comme doublon.
    extract_text: Callable
        Fonction d'extraction du texte, cf. `parse_report`.

    Returns
    -------
    records: list[dict]
        Une entrée par fichier PDF, dans l'ordre d'entrée.
    """
    seen = {period_key(x) for x in existing if is_success(x)}
    records = []
    for filename, pdf_bytes in files:
        if not filename.lower().endswith(".pdf"):
            logging.info(f"{filename} est ignoré (pas un PDF)")
            continue
        logging.info(f"Traitement de {filename}")
        try:
            record = parse_report(filename, pdf_bytes, extract_text=extract_text)
        except Exception as exc:
            # une erreur inattendue sur un fichier ne doit pas interrompre le lot
            logging.exception(f"{filename}: erreur inattendue")
            record = make_error(filename, str(exc) or "Erreur lors de l'extraction du PDF.")
        if is_success(record):
            if period_key(record) in seen:
                msg = (
                    f"Ce mois est déjà importé ({record['month_label']} {record['year']}"
                    + f" — {record['commune']})"
                )
                logging.warning(f"{filename}: {msg}")
                record = make_error(record["source_file"], msg)
            else:
                seen.add(period_key(record))
        records.append(record)
    nb_err = sum(1 for x in records if not is_success(x))
    logging.info(f"{len(records)} fichier(s) traité(s), dont {nb_err} en erreur")
    return records


def find_missing_months(records: Iterable[dict]) -> list[str]:
    """Lister les mois manquants entre le premier et le dernier mois importés.

    Parameters
    ----------
    records: Iterable[dict]
        Entrées importées ; les échecs sont ignorés.

    Returns
    -------
    missing: list[str]
        Libellés des mois absents, dans l'ordre du calendrier.
    """
    mois_loaded = {x["month"] for x in records if is_success(x)}
    if not mois_loaded:
        return []
    return [
        MOIS_LABELS[m]
        for m in range(min(mois_loaded), max(mois_loaded) + 1)
        if m not in mois_loaded
    ]


def read_folder(in_dir: Path, recursive: bool = False) -> list[tuple[str, bytes]]:
    """Lire les fichiers PDF d'un dossier, triés par nom."""
    fps_pdf = sorted(in_dir.rglob(PAT_PDF) if recursive else in_dir.glob(PAT_PDF))
    logging.info(f"Dossier {in_dir}: {len(fps_pdf)} fichier(s) PDF trouvé(s)")
    return [(fp_pdf.name, fp_pdf.read_bytes()) for fp_pdf in fps_pdf]


if __name__ == "__main__":
    # log
    dir_log = Path(__file__).resolve().parents[3] / "logs"
    if not dir_log.is_dir():
        dir_log.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=f"{dir_log}/parse_reports_{datetime.now().isoformat()}.log",
        encoding="utf-8",
        level=logging.INFO,
    )
    logging.captureWarnings(True)

    # arguments de la commande exécutable
    parser = argparse.ArgumentParser()
    parser.add_argument("in_dir", help="Dossier contenant les rapports PDF à traiter")
    parser.add_argument(
        "out_file",
        help="Chemin vers le fichier CSV en sortie contenant les indicateurs extraits",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="pdfminer",
        help="Bibliothèque d'extraction du texte",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Parcourt récursivement le dossier in_dir",
    )
    group = parser.add_mutually_exclusive_group()
    # par défaut, le fichier out_file ne doit pas exister, sinon deux options mutuellement exclusives:
    # "redo" (écrase le fichier existant) et "append" (étend le fichier existant)
    group.add_argument(
        "--redo",
        action="store_true",
        help="Ré-exécuter le traitement d'un lot, et écraser le fichier de sortie",
    )
    group.add_argument(
        "--append",
        action="store_true",
        help="Ajoute les rapports au fichier out_file s'il existe (les mois déjà importés sont refusés)",
    )
    args = parser.parse_args()

    # entrée: dossier de PDF
    in_dir = Path(args.in_dir).resolve()
    if not in_dir.is_dir():
        raise ValueError(f"Le dossier en entrée {in_dir} n'existe pas.")

    # sortie: CSV des indicateurs
    out_file = Path(args.out_file).resolve()
    if out_file.is_file():
        if not args.redo and not args.append:
            # erreur si le fichier CSV existe déjà mais ni redo, ni append
            raise ValueError(
                f"Le fichier de sortie {out_file} existe déjà. Pour l'écraser, ajoutez --redo ; pour l'augmenter, ajoutez --append."
            )
    else:
        # si out_file n'existe pas, créer son dossier parent si besoin
        out_dir = out_file.parent
        logging.info(
            f"Dossier de sortie: {out_dir} {'existe déjà' if out_dir.is_dir() else 'doit être créé'}."
        )
        out_dir.mkdir(parents=True, exist_ok=True)

    df_old = None
    existing = []
    if args.append and out_file.is_file():
        # si 'append', les périodes déjà importées servent à détecter les doublons
        df_old = pd.read_csv(out_file, dtype=DTYPE_DATA)
        existing = df_old[df_old["error"].isna()].to_dict(orient="records")

    def _extract_text(pdf_bytes, filename=None):
        return extract_native_text(pdf_bytes, filename=filename, backend=args.backend)

    records = process_files(
        read_folder(in_dir, recursive=args.recursive),
        existing=existing,
        extract_text=_extract_text,
    )
    for missing in find_missing_months(existing + records):
        logging.warning(f"Mois manquant dans la série: {missing}")
    df_new = records_to_dataframe(records)
    check_indicateurs(df_new)
    report_missing_indicators(df_new)
    # sauvegarder les infos extraites dans un fichier CSV
    if df_old is not None:
        df_proc = pd.concat([df_old, df_new])
    else:
        df_proc = df_new
    df_proc.to_csv(out_file, index=False)
