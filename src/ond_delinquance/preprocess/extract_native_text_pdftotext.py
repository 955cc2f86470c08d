"""Extrait le texte natif des fichiers PDF avec pdftotext

<https://github.com/jalan/pdftotext>

Installation: `pip install ond-delinquance[pdftotext]`, après avoir installé
les en-têtes de poppler (<https://github.com/jalan/pdftotext#os-dependencies>).
"""

from importlib.metadata import version  # pour récupérer la version de pdftotext
from io import BytesIO
import unicodedata

import pdftotext

from ond_delinquance.errors import UnreadablePdfError

# version de la bibliothèque d'extraction, tracée dans les logs
PDFTOTEXT_VERSION = version("pdftotext")


def extract_native_text_pdftotext(pdf_bytes: bytes, filename: str | None = None) -> str:
    """Extrait le texte natif d'un PDF avec pdftotext.

    Parameters
    ----------
    pdf_bytes: bytes
        Contenu du fichier PDF.
    filename: str | None
        Nom du fichier, pour les messages d'erreur.

    Returns
    -------
    norm_txt: str
        Texte extrait, pages séparées par "\\f", en forme NFC.

    Raises
    ------
    UnreadablePdfError
        Si poppler ne parvient pas à ouvrir le fichier.
    """
    try:
        pdf = pdftotext.PDF(BytesIO(pdf_bytes))
    except pdftotext.Error as exc:
        raise UnreadablePdfError(filename, str(exc)) from exc
    # chaque page produite par pdftotext se termine par "\f", on enlève le dernier
    txt = "".join(pdf[i] for i in range(len(pdf))).removesuffix("\f")
    # normaliser le texte extrait en forme NFC
    return unicodedata.normalize("NFC", txt)
