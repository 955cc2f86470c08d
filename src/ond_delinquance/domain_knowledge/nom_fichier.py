"""Analyse des noms de fichiers des rapports mensuels.

Deux conventions de nommage coexistent, selon que le fichier a été renommé
avec ou sans le numéro du mois en préfixe:
* format A: "06_Saint_Alban_juin2024.pdf" ;
* format B: "Saint_Alban_septembre2023.pdf".

Le nom de la commune peut contenir un nombre quelconque de mots séparés par
"_" ou "-" ; le mois est écrit en lettres (complet, abrégé, avec ou sans
accent) et collé à l'année sur 4 chiffres.
"""

import logging
import re

from ond_delinquance.errors import FilenameFormatError, MonthNotRecognizedError
from ond_delinquance.utils.str_date import get_label_mois, get_num_mois
from ond_delinquance.utils.text_utils import fix_encoding


# extension, insensible à la casse
RE_EXT_PDF = r"\.pdf$"
P_EXT_PDF = re.compile(RE_EXT_PDF, re.IGNORECASE)

# le nom de la commune est capturé de façon non-gloutonne: c'est l'ancrage
# de l'année (4 chiffres en fin de chaîne) qui délimite le mois
RE_COMMUNE = r"(?P<commune>.+?)"
RE_MOIS = r"(?P<mois>[^\d_]+?)"
RE_ANNEE = r"(?P<annee>\d{4})"

# format A: numéro du mois en préfixe
RE_FILENAME_A = rf"^(?P<num>\d{{1,2}})_{RE_COMMUNE}_{RE_MOIS}{RE_ANNEE}$"
P_FILENAME_A = re.compile(RE_FILENAME_A)
# format B: sans préfixe
RE_FILENAME_B = rf"^{RE_COMMUNE}_{RE_MOIS}{RE_ANNEE}$"
P_FILENAME_B = re.compile(RE_FILENAME_B)

# formats à essayer, dans l'ordre
FILENAME_PATTERNS = (P_FILENAME_A, P_FILENAME_B)


def get_base_name(filename: str) -> str:
    """Nom de fichier sans extension ".pdf", ré-encodé et normalisé en NFC."""
    base = P_EXT_PDF.sub("", filename.strip()).strip()
    return fix_encoding(base)


def parse_filename(filename: str) -> dict:
    """Extraire la commune, le mois et l'année d'un nom de fichier.

    Parameters
    ----------
    filename: str
        Nom du fichier, ex: "06_Saint_Alban_juin2024.pdf".

    Returns
    -------
    parsed: dict
        Soit {"commune", "month", "month_label", "year"},
        soit {"error"} si le nom de fichier ou le mois n'est pas reconnu.
    """
    base = get_base_name(filename)
    for p_fn in FILENAME_PATTERNS:
        if m_fn := p_fn.match(base):
            break
    else:
        err = FilenameFormatError(filename)
        logging.warning(str(err))
        return {"error": str(err)}

    raw_mois = m_fn.group("mois")
    num_mois = get_num_mois(raw_mois)
    if num_mois is None:
        err = MonthNotRecognizedError(raw_mois.strip())
        logging.warning(f"{filename}: {err}")
        return {"error": str(err)}

    if "num" in p_fn.groupindex and int(m_fn.group("num")) != num_mois:
        # le préfixe devrait correspondre au mois, mais c'est le nom du mois qui fait foi
        logging.warning(
            f"{filename}: préfixe {m_fn.group('num')} incohérent avec le mois {raw_mois}"
        )

    commune = m_fn.group("commune").replace("_", " ").replace("-", " ").strip()
    return {
        "commune": commune,
        "month": num_mois,
        "month_label": get_label_mois(num_mois),
        "year": int(m_fn.group("annee")),
    }
