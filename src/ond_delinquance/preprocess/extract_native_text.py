"""Extraire le texte natif des rapports mensuels au format PDF.

Le texte est extrait par défaut avec pdfminer.six ; le wrapper python de
l'utilitaire "pdftotext" de poppler peut être choisi à la place, s'il est
installé.

Le texte est normalisé en forme NFC: <https://docs.python.org/3/howto/unicode.html#comparing-strings>.

Exécuté comme script, affiche le texte extrait d'un PDF pour analyser la
structure d'un nouveau modèle de rapport.
"""

import argparse
import logging
from pathlib import Path

from ond_delinquance.preprocess.extract_native_text_pdfminer import (
    extract_native_text_pdfminer,
)

# bibliothèques d'extraction disponibles
BACKENDS = ("pdfminer", "pdftotext")
# nombre de caractères affichés par le script
NB_CHARS_PREVIEW = 12000


def extract_native_text(
    pdf_bytes: bytes, filename: str | None = None, backend: str = "pdfminer"
) -> str:
    """Extrait le texte natif d'un PDF.

    Parameters
    ----------
    pdf_bytes: bytes
        Contenu du fichier PDF.
    filename: str | None
        Nom du fichier, pour les messages d'erreur et de log.
    backend: str, defaults to "pdfminer"
        Bibliothèque d'extraction, "pdfminer" ou "pdftotext".

    Returns
    -------
    txt: str
        Texte du document ; vide si le PDF n'a pas de couche texte.

    Raises
    ------
    UnreadablePdfError
        Si le fichier ne peut pas être lu comme un PDF.
    """
    logging.info(f"Extraction du texte natif: {filename} ({backend})")
    if backend == "pdfminer":
        txt = extract_native_text_pdfminer(pdf_bytes, filename=filename)
    elif backend == "pdftotext":
        # dépendance optionnelle (extra "pdftotext"), qui nécessite poppler
        from ond_delinquance.preprocess.extract_native_text_pdftotext import (
            PDFTOTEXT_VERSION,
            extract_native_text_pdftotext,
        )

        logging.debug(f"pdftotext {PDFTOTEXT_VERSION}")
        txt = extract_native_text_pdftotext(pdf_bytes, filename=filename)
    else:
        raise ValueError(f"Bibliothèque d'extraction inconnue: {backend}")
    if txt.strip():
        logging.info(f"Texte natif présent: {filename}")
    else:
        # PDF image: tous les indicateurs seront absents
        logging.warning(f"Texte natif absent: {filename}")
    return txt


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # arguments de la commande exécutable
    parser = argparse.ArgumentParser()
    parser.add_argument("in_file", help="Chemin vers le fichier PDF à analyser")
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="pdfminer",
        help="Bibliothèque d'extraction du texte",
    )
    args = parser.parse_args()

    in_file = Path(args.in_file).resolve()
    if not in_file.is_file():
        raise ValueError(f"Le fichier en entrée {in_file} n'existe pas.")

    txt = extract_native_text(in_file.read_bytes(), filename=in_file.name, backend=args.backend)
    print(f"--- TEXTE ({NB_CHARS_PREVIEW} premiers caractères) ---\n")
    print(txt[:NB_CHARS_PREVIEW])
