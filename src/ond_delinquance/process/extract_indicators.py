"""Extraire les indicateurs d'un rapport mensuel à partir de son texte brut.

Le texte issu d'un PDF entremêle colonnes, notes de bas de page et retours
à la ligne qui reflètent la mise en page et non le sens. Le texte est donc
ramené à une seule ligne, puis chaque valeur est cherchée à partir d'un
libellé littéral (première occurrence), dans une fenêtre de taille bornée
pour ne pas déborder sur la rubrique suivante.

Une valeur introuvable vaut None, jamais 0, et n'est jamais une erreur.
"""

import logging
import math
import re

from ond_delinquance.domain_knowledge.indicateurs import (
    CATEGORY_LABELS,
    DTYPE_RAW_INDICATORS,
    INDICATEURS,
    LABEL_FAITS,
    MAX_INT_VALUE,
    SEUILS_PLAUSIBILITE,
    WINDOW_FAITS,
    WINDOW_PAIR,
    WINDOW_SINGLE,
    CategoryLabels,
    PlausibilityThresholds,
)
from ond_delinquance.utils.text_utils import normalize_string, parse_int, parse_number


# métadonnées administratives: nombre suivi de son unité
RE_POPULATION = r"Population\s*\*?\s*:?\s*(\d[\d\s]*)\s*habitants"
P_POPULATION = re.compile(RE_POPULATION, re.IGNORECASE)
RE_SURFACE = r"Surface\s*:?\s*(\d[\d\s,]*)\s*km"
P_SURFACE = re.compile(RE_SURFACE, re.IGNORECASE)
RE_DENSITE = r"Densité\s*:?\s*(\d[\d\s,]*)\s*hab"
P_DENSITE = re.compile(RE_DENSITE, re.IGNORECASE)

# paire N-1, N: deux entiers suivis d'un délimiteur ("+", "-", "%" ou un chiffre,
# ex: "12 15 +25%"), ce qui écarte les numéros d'index isolés
RE_PAIR = r"(\d+)\s+(\d+)\s*[+\-%\d]"
P_PAIR = re.compile(RE_PAIR)
RE_INT = r"\d+"
P_INT = re.compile(RE_INT)

# cumul annuel: "(... fait(s)) 123" dans le bloc des faits constatés, sinon "Cumul 2024 123"
RE_CUMUL_FAITS = r"fait\s*\(\s*s\s*\)\s*\)\s*(\d{2,4})"
P_CUMUL_FAITS = re.compile(RE_CUMUL_FAITS, re.IGNORECASE)
RE_CUMUL_ANNEE = r"Cumul\s*20\d{2}\s*(\d{2,4})"
P_CUMUL_ANNEE = re.compile(RE_CUMUL_ANNEE, re.IGNORECASE)

# taux de criminalité: "Taux de criminalité 3,9 ‰ 4,2 ‰", on garde N
RE_TAUX = r"Taux de criminalité\s*[\d.,\s]+\s*‰\s*([\d.,\s]+)\s*‰"
P_TAUX = re.compile(RE_TAUX, re.IGNORECASE)


def normalize_text(raw_text: str | None) -> str:
    """Ramener le texte brut d'un document à une seule ligne.

    Parameters
    ----------
    raw_text: str | None
        Texte extrait du PDF.

    Returns
    -------
    norm_txt: str
        Texte où les suites d'espaces et de retours à la ligne sont
        remplacées par une espace, et où tirets et apostrophes sont unifiés.
    """
    return normalize_string(raw_text or "", apos=True, hyph=True, spaces=True)


def parse_count(raw_num: str | None) -> int | None:
    """Convertit en entier un nombre de faits ou d'habitants, None s'il est hors bornes."""
    val = parse_int(raw_num)
    if val is not None and val > MAX_INT_VALUE:
        logging.debug(f"Entier hors bornes ignoré: {val}")
        return None
    return val


def text_after(norm_txt: str, label: str, window: int) -> str | None:
    """Renvoie les `window` caractères qui suivent la 1re occurrence de `label`, None si absent."""
    idx = norm_txt.find(label)
    if idx == -1:
        return None
    beg = idx + len(label)
    return norm_txt[beg : beg + window]


def is_plausible_pair(
    val_n1: int, val_n: int, seuils: PlausibilityThresholds = SEUILS_PLAUSIBILITE
) -> bool:
    """Vérifie qu'une paire d'entiers peut être une paire de valeurs (N-1, N).

    Parameters
    ----------
    val_n1: int
        Premier nombre (année N-1).
    val_n: int
        Second nombre (année N).
    seuils: PlausibilityThresholds
        Seuils de plausibilité.

    Returns
    -------
    plausible: bool
        False si l'un des nombres est trop grand pour un mois, ou si la paire
        a la forme d'une référence d'index (premier grand, second petit).
    """
    if val_n1 > seuils.max_count or val_n > seuils.max_count:
        return False
    if val_n1 >= seuils.article_code_min and val_n < seuils.article_sub_max:
        return False
    return True


def get_two_ints_after(
    norm_txt: str,
    label: str,
    window: int = WINDOW_PAIR,
    seuils: PlausibilityThresholds = SEUILS_PLAUSIBILITE,
) -> tuple[int | None, int | None]:
    """Extraire la paire de valeurs (N-1, N) qui suit un libellé.

    Parameters
    ----------
    norm_txt: str
        Texte normalisé du document.
    label: str
        Libellé à rechercher.
    window: int
        Nombre de caractères examinés après le libellé.
    seuils: PlausibilityThresholds
        Seuils de plausibilité.

    Returns
    -------
    vals: tuple[int | None, int | None]
        Première paire plausible, (None, None) si aucune.
    """
    after = text_after(norm_txt, label, window)
    if after is None:
        return (None, None)
    for m_pair in P_PAIR.finditer(after):
        val_n1 = parse_int(m_pair.group(1))
        val_n = parse_int(m_pair.group(2))
        if not is_plausible_pair(val_n1, val_n, seuils):
            logging.debug(f"{label}: paire rejetée ({val_n1}, {val_n})")
            continue
        return (val_n1, val_n)
    return (None, None)


def get_one_int_after(norm_txt: str, label: str, window: int = WINDOW_SINGLE) -> int | None:
    """Extraire le premier entier qui suit un libellé, None si absent."""
    after = text_after(norm_txt, label, window)
    if after is None:
        return None
    if m_int := P_INT.search(after):
        return parse_count(m_int.group(0))
    return None


def get_category_value(
    norm_txt: str,
    labels: CategoryLabels,
    seuils: PlausibilityThresholds = SEUILS_PLAUSIBILITE,
) -> int | None:
    """Extraire la valeur N d'une catégorie en essayant ses libellés dans l'ordre.

    Parameters
    ----------
    norm_txt: str
        Texte normalisé du document.
    labels: CategoryLabels
        Libellés de la catégorie.
    seuils: PlausibilityThresholds
        Seuils de plausibilité des paires.

    Returns
    -------
    val_n: int | None
        Valeur de l'année N (second nombre de la 1re paire trouvée), sinon
        premier entier isolé trouvé après un libellé de repli, sinon None.
    """
    for label in labels.paired:
        _, val_n = get_two_ints_after(norm_txt, label, seuils=seuils)
        if val_n is not None:
            return val_n
    for label in labels.single:
        val = get_one_int_after(norm_txt, label)
        if val is not None:
            logging.debug(f"{label}: valeur isolée {val} (repli)")
            return val
    return None


def get_admin_metadata(norm_txt: str) -> dict:
    """Extraire population, surface et densité de la commune.

    Parameters
    ----------
    norm_txt: str
        Texte normalisé du document.

    Returns
    -------
    meta: dict
        Population (entier), surface (km²) et densité (hab./km²), None si absentes.
    """
    m_pop = P_POPULATION.search(norm_txt)
    m_sur = P_SURFACE.search(norm_txt)
    m_den = P_DENSITE.search(norm_txt)
    return {
        "population": parse_count(m_pop.group(1)) if m_pop else None,
        "surface": parse_number(m_sur.group(1)) if m_sur else None,
        "densite": parse_number(m_den.group(1)) if m_den else None,
    }


def get_faits_constates(norm_txt: str) -> dict:
    """Extraire le nombre de faits constatés (N-1, N) et le cumul annuel.

    Les deux valeurs sont les deux premiers entiers du bloc qui suit le
    libellé: les totaux mensuels peuvent dépasser le plafond de
    plausibilité des catégories, qui ne s'applique donc pas ici.

    Parameters
    ----------
    norm_txt: str
        Texte normalisé du document.

    Returns
    -------
    faits: dict
        "facts_prior_year", "facts_current_year", "cumulative_ytd".
    """
    faits_n1 = faits_n = cumul = None
    # la fenêtre WINDOW_FAITS est comptée depuis le début du libellé
    block = text_after(norm_txt, LABEL_FAITS, WINDOW_FAITS - len(LABEL_FAITS))
    if block is not None:
        nums = P_INT.findall(block)
        if len(nums) >= 2:
            faits_n1, faits_n = parse_count(nums[0]), parse_count(nums[1])
        # cumul accolé au bloc des faits constatés
        if m_cumul := P_CUMUL_FAITS.search(block):
            cumul = parse_int(m_cumul.group(1))
    if cumul is None:
        # repli: libellé "Cumul 20XX" ailleurs dans le document
        if m_cumul := P_CUMUL_ANNEE.search(norm_txt):
            cumul = parse_int(m_cumul.group(1))
    return {
        "facts_prior_year": faits_n1,
        "facts_current_year": faits_n,
        "cumulative_ytd": cumul,
    }


def get_taux_criminalite(norm_txt: str) -> float | None:
    """Extraire le taux de criminalité de l'année N (pour 1000 habitants)."""
    if m_taux := P_TAUX.search(norm_txt):
        return parse_number(m_taux.group(1))
    return None


def extract_indicators(
    raw_text: str | None,
    seuils: PlausibilityThresholds = SEUILS_PLAUSIBILITE,
) -> dict:
    """Extraire les indicateurs bruts du texte d'un rapport mensuel.

    Parameters
    ----------
    raw_text: str | None
        Texte extrait du PDF.
    seuils: PlausibilityThresholds
        Seuils de plausibilité des paires de valeurs des catégories.

    Returns
    -------
    raw_ind: dict
        Jeu d'indicateurs bruts, une clé par entrée de DTYPE_RAW_INDICATORS ;
        toute valeur absente vaut None.
    """
    norm_txt = normalize_text(raw_text)
    raw_ind = (
        get_admin_metadata(norm_txt)
        | get_faits_constates(norm_txt)
        | {"crime_rate": get_taux_criminalite(norm_txt)}
    )
    for code, labels in CATEGORY_LABELS.items():
        raw_ind[code] = get_category_value(norm_txt, labels, seuils=seuils)
    # ordre stable des clés
    raw_ind = {key: raw_ind[key] for key in DTYPE_RAW_INDICATORS}
    nb_missing = sum(1 for val in raw_ind.values() if val is None)
    if nb_missing:
        logging.info(f"Indicateurs absents du texte: {nb_missing}/{len(raw_ind)}")
    return raw_ind


def variation_pct(val_n1: int | None, val_n: int | None) -> int | None:
    """Variation en pourcentage de N-1 à N, arrondie à l'entier.

    L'arrondi se fait au demi supérieur (2,5 -> 3 ; -2,5 -> -2).

    Parameters
    ----------
    val_n1: int | None
        Valeur de l'année N-1.
    val_n: int | None
        Valeur de l'année N.

    Returns
    -------
    pct: int | None
        Variation en %, None si l'une des valeurs manque ou si N-1 <= 0.
    """
    if val_n1 is None or val_n is None or val_n1 <= 0:
        return None
    return math.floor((val_n - val_n1) * 100 / val_n1 + 0.5)


def build_indicator_records(raw_ind: dict) -> dict:
    """Construire la table des indicateurs publiés à partir des indicateurs bruts.

    Parameters
    ----------
    raw_ind: dict
        Jeu d'indicateurs bruts, produit par `extract_indicators`.

    Returns
    -------
    indicators: dict
        Un indicateur par code de INDICATEURS, avec "label", "category",
        "value_prior_year", "value_current_year", "cumulative",
        "variation_percent" ; "general_faits" porte aussi "crime_rate".
    """
    indicators = {}
    for code, ind_def in INDICATEURS.items():
        indicators[code] = {
            "label": ind_def.label,
            "category": ind_def.category,
            "value_prior_year": None,
            "value_current_year": raw_ind.get(ind_def.source),
            "cumulative": None,
            "variation_percent": None,
        }
    # le bloc général porte aussi N-1, le cumul, la variation et le taux
    faits_n1 = raw_ind.get("facts_prior_year")
    faits_n = raw_ind.get("facts_current_year")
    indicators["general_faits"] |= {
        "value_prior_year": faits_n1,
        "cumulative": raw_ind.get("cumulative_ytd"),
        "variation_percent": variation_pct(faits_n1, faits_n),
        "crime_rate": raw_ind.get("crime_rate"),
    }
    return indicators
