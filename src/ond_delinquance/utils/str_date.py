"""
# Reconnaissance des mois écrits en français.

Les rapports mensuels sont nommés d'après le mois qu'ils couvrent, écrit
en toutes lettres, abrégé ou avec des fautes de frappe ou d'accent.
"""

import re

from ond_delinquance.utils.text_utils import remove_accents


# table associative: nom du mois (complet ou abrégé) => numéro
MAP_MOIS = {
    "janvier": 1,
    "janv": 1,
    "jan": 1,
    "février": 2,
    "fevrier": 2,
    "fev": 2,
    "mars": 3,
    "avril": 4,
    "avr": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "juil": 7,
    "août": 8,
    "aout": 8,
    "aou": 8,
    "septembre": 9,
    "sept": 9,
    "sep": 9,
    "octobre": 10,
    "oct": 10,
    "novembre": 11,
    "nov": 11,
    "décembre": 12,
    "decembre": 12,
    "déc": 12,
    "dec": 12,
}

# fautes de frappe rencontrées dans les noms de fichiers (clés sans accent)
MOIS_FALLBACK = {
    "delcembre": 12,
    "aoult": 8,
    "aoul": 8,
}

# libellés canoniques, indexés par numéro de mois (l'index 0 n'est pas utilisé)
MOIS_LABELS = (
    "",
    "Janvier",
    "Février",
    "Mars",
    "Avril",
    "Mai",
    "Juin",
    "Juillet",
    "Août",
    "Septembre",
    "Octobre",
    "Novembre",
    "Décembre",
)


def simplify_mois(raw_mois: str) -> str:
    """Simplifier un nom de mois: minuscules, sans accent ni espace.

    Parameters
    ----------
    raw_mois: str
        Nom du mois, tel qu'extrait.

    Returns
    -------
    mois_simple: str
        Nom du mois simplifié.
    """
    mois_simple = remove_accents(raw_mois.strip().lower())
    return re.sub(r"\s+", "", mois_simple)


def get_num_mois(raw_mois: str) -> int | None:
    """Déterminer le numéro d'un mois à partir de son nom.

    Essaie successivement la graphie exacte (en minuscules), la graphie
    sans accent, puis la table des fautes de frappe connues.

    Parameters
    ----------
    raw_mois: str
        Nom du mois, ex: "Juin", "août", "decembre", "sept".

    Returns
    -------
    num_mois: int | None
        Numéro du mois (1 à 12), None si le nom n'est pas reconnu.
    """
    mois_trim = raw_mois.strip().lower()
    mois_clean = simplify_mois(raw_mois)
    return (
        MAP_MOIS.get(mois_trim)
        or MAP_MOIS.get(mois_clean)
        or MOIS_FALLBACK.get(mois_clean)
    )


def get_label_mois(num_mois: int) -> str:
    """Renvoie le libellé canonique d'un mois ("Janvier" ... "Décembre")."""
    if not 1 <= num_mois <= 12:
        raise ValueError(f"Numéro de mois invalide: {num_mois}")
    return MOIS_LABELS[num_mois]
