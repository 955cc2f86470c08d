"""
# Extrait le texte natif des fichiers PDF avec pdfminer.six

Les rapports mensuels sont des PDF texte produits par export direct:
l'ordre des mots dans une page suffit, la mise en page exacte n'est pas
exploitée.
"""

from io import BytesIO
import unicodedata

from pdfminer.high_level import extract_text
from pdfminer.layout import LAParams
from pdfminer.psparser import PSException

from ond_delinquance.errors import UnreadablePdfError


# <https://pdfminersix.readthedocs.io/en/latest/reference/composable.html?highlight=laparams#laparams>
# - "boxes_flow=None" désactive la détection avancée du layout: les libellés
# d'une ligne de tableau restent suivis de leurs valeurs N-1 et N, au lieu
# d'être regroupés en colonne avant toutes les valeurs
LAPARAMS = LAParams(boxes_flow=None)


def extract_native_text_pdfminer(pdf_bytes: bytes, filename: str | None = None) -> str:
    """Extrait le texte natif d'un PDF avec pdfminer.six.

    Les pages sont séparées par un "form feed" ("\\x0c", "\\f" en python).

    Le texte est normalisé en forme NFC.

    Parameters
    ----------
    pdf_bytes: bytes
        Contenu du fichier PDF.
    filename: str | None
        Nom du fichier, pour les messages d'erreur.

    Returns
    -------
    norm_txt: str
        Texte extrait, éventuellement vide si le PDF n'a pas de couche texte.

    Raises
    ------
    UnreadablePdfError
        Si pdfminer.six ne parvient pas à analyser le fichier.
    """
    try:
        txt = extract_text(BytesIO(pdf_bytes), laparams=LAPARAMS)
    except PSException as exc:
        # PDFSyntaxError, PDFEncryptionError etc. dérivent tous de PSException
        raise UnreadablePdfError(filename, str(exc) or type(exc).__name__) from exc
    # normaliser le texte extrait en forme NFC
    return unicodedata.normalize("NFC", txt)
