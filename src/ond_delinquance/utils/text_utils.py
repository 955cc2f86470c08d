"""Normalisation du texte extrait des PDF et des noms de fichiers.

"""

import re
import unicodedata


# normalisation des tirets, apostrophes
# <https://github.com/gorgitko/molminer/blob/master/molminer/normalize.py>
# <https://github.com/mcs07/ChemDataExtractor/blob/master/chemdataextractor/text/__init__.py>
#
#: Hyphen and dash characters.
HYPHENS = {
    "‐",  # \u2010 Hyphen
    "‑",  # \u2011 Non-breaking hyphen
    "⁃",  # \u2043 Hyphen bullet
    "‒",  # \u2012 figure dash
    "–",  # \u2013 en dash
    "—",  # \u2014 em dash
    "―",  # \u2015 horizontal bar
}

#: Minus characters.
MINUSES = {
    "−",  # \u2212 Minus
    "－",  # \uff0d Full-width Hyphen-minus
    "⁻",  # \u207b Superscript minus
}

#: Apostrophe characters.
APOSTROPHES = {
    "’",  # \u2019
    "՚",  # \u055a
    "Ꞌ",  # \ua78b
    "ꞌ",  # \ua78c
    "＇",  # \uff07
}

# séquences produites par la lecture en latin-1 (cp1252) d'un nom de fichier encodé en UTF-8
MAP_MOJIBAKE = {
    "Ã©": "é",
    "Ã¨": "è",
    "Ã\u00a0": "à",  # "à" = C3 A0, A0 est l'espace insécable en latin-1
    "Ã ": "à",  # idem, l'espace insécable a déjà été remplacée par une espace
    "Ã´": "ô",
    "Ã»": "û",
    "Ã§": "ç",
    "Ã®": "î",
    "Ã¯": "ï",
    "Ã¼": "ü",
    "Ã‰": "É",
    "Ã€": "À",
}

# entier en tête de chaîne (équivalent de parseInt)
RE_INT_PREFIX = r"[+-]?\d+"
P_INT_PREFIX = re.compile(RE_INT_PREFIX)


# suppression des accents, cédilles etc
def remove_accents(str_in: str) -> str:
    """Enlève les accents d'une chaîne de caractères.

    cf. <https://stackoverflow.com/a/517974>

    Parameters
    ----------
    str_in: string
        Chaîne de caractères pouvant contenir des caractères combinants
        (accents, cédille etc.).

    Returns
    -------
    str_out: string
        Chaîne de caractères sans caractère combinant.
    """
    nfkd_form = unicodedata.normalize("NFKD", str_in)
    return "".join([c for c in nfkd_form if not unicodedata.combining(c)])


def normalize_string(
    raw_str: str,
    apos: bool = False,
    hyph: bool = False,
    spaces: bool = False,
) -> str:
    """Normaliser une chaîne de caractères.

    Parameters
    ----------
    raw_str: str
        Chaîne de caractères à normaliser
    apos: bool, defaults to False
        Si True, remplace les variantes d'apostrophes par "'".
    hyph: bool, defaults to False
        Si True, remplace les tirets et signes moins par "-".
    spaces: bool, defaults to False
        Si True, remplace les suites d'espaces (y compris les retours à la
        ligne) par une espace simple, et supprime les espaces initiaux et finaux.

    Returns
    -------
    nor_str: str
        Chaîne de caractères normalisée
    """
    nor_str = raw_str
    if hyph:
        # les PDF texte contiennent généralement des "en dash" (–) et parfois un vrai
        # signe moins (−) devant les variations
        for hyphen in HYPHENS:
            nor_str = nor_str.replace(hyphen, "-")
        for minus in MINUSES:
            nor_str = nor_str.replace(minus, "-")
        # supprimer les "soft hyphen" (qui sont invisibles au rendu)
        nor_str = nor_str.replace("\u00ad", "")
    if apos:
        for single_quote in APOSTROPHES:
            nor_str = nor_str.replace(single_quote, "'")  # '
        # et supprimer les éventuels espaces inutiles après une apostrophe
        nor_str = re.sub(r"[']\s*", "'", nor_str, flags=re.MULTILINE)
    if spaces:
        # remplacer toutes les suites d'espaces (de tous types) par une espace simple
        nor_str = re.sub(r"\s+", " ", nor_str, flags=re.MULTILINE).strip()
    return nor_str


def fix_encoding(str_in: str) -> str:
    """Corrige une chaîne UTF-8 qui a été lue comme du latin-1.

    Les noms de fichiers transmis par certains navigateurs ou serveurs
    contiennent des séquences comme "Ã©" à la place de "é".
    La chaîne est d'abord ré-encodée en latin-1 puis décodée en UTF-8 ;
    si cela échoue, les séquences connues sont remplacées une à une.
    Une chaîne correctement encodée (sans "Ã") est renvoyée inchangée,
    à la normalisation NFC près.

    Parameters
    ----------
    str_in: str
        Chaîne éventuellement mal décodée.

    Returns
    -------
    str_out: str
        Chaîne corrigée, en forme NFC.
    """
    str_out = str_in
    if "Ã" in str_out:
        try:
            decoded = str_out.encode("latin-1").decode("utf-8")
        except UnicodeError:
            decoded = None
        if decoded and "Ã" not in decoded:
            str_out = decoded
    for bad, good in MAP_MOJIBAKE.items():
        str_out = str_out.replace(bad, good)
    return unicodedata.normalize("NFC", str_out)


def parse_number(raw_num: str | None) -> float | None:
    """Convertit un nombre écrit à la française en flottant.

    Les espaces (séparateurs de milliers) sont supprimées et la virgule
    est interprétée comme séparateur décimal.

    Parameters
    ----------
    raw_num: str | None
        Nombre tel qu'extrait du texte, ex: "12 345" ou "45,2".

    Returns
    -------
    num: float | None
        Valeur numérique, None si la chaîne est vide ou invalide.
    """
    if raw_num is None:
        return None
    num_str = re.sub(r"\s", "", raw_num).replace(",", ".", 1)
    if not num_str:
        return None
    try:
        return float(num_str)
    except ValueError:
        return None


def parse_int(raw_num: str | None) -> int | None:
    """Convertit en entier le nombre en tête de chaîne.

    Parameters
    ----------
    raw_num: str | None
        Nombre tel qu'extrait du texte, éventuellement avec des espaces.

    Returns
    -------
    num: int | None
        Valeur entière, None si la chaîne ne commence pas par un entier.
    """
    if raw_num is None:
        return None
    num_str = re.sub(r"\s", "", raw_num)
    if m_int := P_INT_PREFIX.match(num_str):
        return int(m_int.group(0))
    return None
