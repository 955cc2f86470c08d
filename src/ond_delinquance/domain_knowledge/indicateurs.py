"""Catalogue des indicateurs des rapports mensuels de l'observatoire de la délinquance.

Chaque catégorie d'infraction est repérée dans le texte par un ou plusieurs
libellés. Les rapports ont changé de formulation au fil des révisions: les
libellés sont donc essayés dans l'ordre, d'abord pour trouver la paire de
valeurs N-1 / N, puis, en dernier recours, pour trouver une valeur isolée.
"""

from typing import NamedTuple


class PlausibilityThresholds(NamedTuple):
    """Seuils de plausibilité d'une paire de valeurs (N-1, N) d'une catégorie.

    Seuils empiriques, calés sur les rapports disponibles: ils peuvent
    devoir être ajustés pour une nouvelle mise en page.
    """

    # aucune catégorie ne dépasse ce nombre de faits sur un mois
    max_count: int = 200
    # une paire (a, b) avec a >= article_code_min et b < article_sub_max
    # ressemble à une référence d'index, ex: "(41, 2)", pas à des données
    article_code_min: int = 26
    article_sub_max: int = 5


SEUILS_PLAUSIBILITE = PlausibilityThresholds()

# fenêtres de recherche après un libellé, en nombre de caractères
WINDOW_PAIR = 180
WINDOW_SINGLE = 80
# bloc des faits constatés, libellé compris
WINDOW_FAITS = 280

# plus grand entier retenu pour une population ou un total de faits,
# au-delà c'est un artefact d'extraction (ex: chiffres accolés)
MAX_INT_VALUE = 99_999_999


class CategoryLabels(NamedTuple):
    """Libellés d'une catégorie, par ordre de priorité."""

    # libellés après lesquels chercher la paire (N-1, N)
    paired: tuple[str, ...]
    # libellés (souvent plus courts) après lesquels chercher une valeur isolée
    single: tuple[str, ...] = ()


# libellés des catégories dans les rapports
CATEGORY_LABELS = {
    "cbv": CategoryLabels(
        paired=("Coups et blessures volontaires",),
        single=("Coups et blessures",),
    ),
    "menaces": CategoryLabels(paired=("Menaces ou chantages",)),
    # "(41" est le début du numéro d'index: évite "Vols simples" dans un titre
    "vols_simples": CategoryLabels(paired=("Vols simples (41",)),
    "camb_resid": CategoryLabels(
        paired=("Cambriolages de résidences",),
        single=("Cambriolages de résidences",),
    ),
    "camb_pro": CategoryLabels(
        paired=(
            "Cambriolages de locaux",
            "professionnelle, publique ou associative",
            "professionnelle ou associative (29)",
        ),
        single=("Cambriolages de locaux",),
    ),
    "roulotte": CategoryLabels(
        paired=("Vols à la roulotte", "roulotte et d'accessoires"),
    ),
    "destruc_veh": CategoryLabels(
        paired=(
            "Destructions et dégradations de véhicules privés",
            "véhicules privés (68)",
        ),
    ),
    "incendies": CategoryLabels(paired=("Incendies volontaires de biens",)),
    "stupef": CategoryLabels(
        paired=("stupéfiants constatées", "législation sur les stupéfiants"),
    ),
    "autorite": CategoryLabels(
        paired=("Atteintes à l'autorité", "autorité (72, 73)"),
    ),
}

# libellés du bloc général et des métadonnées
LABEL_FAITS = "Nombre de faits constatés"

# groupes de catégories
GROUPES = ("Général", "Personnes", "Vols", "Cambriolages", "Automobile", "Autres")


class IndicatorDef(NamedTuple):
    """Entrée de la table des indicateurs publiés."""

    label: str
    category: str
    # clé de la valeur N dans le jeu d'indicateurs brut
    source: str


# table des indicateurs publiés: code => libellé, groupe, valeur source
# les consommateurs en aval s'appuient sur ces codes et libellés exacts
INDICATEURS = {
    "general_faits": IndicatorDef("Faits constatés", "Général", "facts_current_year"),
    "general_taux": IndicatorDef("Taux criminalité (‰)", "Général", "crime_rate"),
    "cbv": IndicatorDef("Coups et blessures volontaires", "Personnes", "cbv"),
    "menaces": IndicatorDef("Menaces ou chantages", "Personnes", "menaces"),
    "vols_simples": IndicatorDef("Vols simples", "Vols", "vols_simples"),
    "camb_resid": IndicatorDef("Cambriolages résidentiels", "Cambriolages", "camb_resid"),
    "camb_pro": IndicatorDef("Cambriolages locaux pro.", "Cambriolages", "camb_pro"),
    "roulotte": IndicatorDef("Vols à la roulotte", "Automobile", "roulotte"),
    "destruc_veh": IndicatorDef("Destructions véhicules", "Automobile", "destruc_veh"),
    "incendies": IndicatorDef("Incendies volontaires", "Autres", "incendies"),
    "stupef": IndicatorDef("Infractions stupéfiants", "Autres", "stupef"),
    "autorite": IndicatorDef("Atteintes à l'autorité", "Autres", "autorite"),
}

# schéma du jeu d'indicateurs brut extrait d'un document
DTYPE_RAW_INDICATORS = {
    # métadonnées administratives
    "population": "Int64",
    "surface": "Float64",
    "densite": "Float64",
    # indicateurs généraux
    "facts_prior_year": "Int64",  # faits constatés N-1
    "facts_current_year": "Int64",  # faits constatés N
    "cumulative_ytd": "Int64",  # cumul depuis le début de l'année
    "crime_rate": "Float64",  # taux pour 1000 habitants
} | {code: "Int64" for code in CATEGORY_LABELS}
