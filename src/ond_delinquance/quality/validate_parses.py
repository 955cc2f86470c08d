"""Valide les indicateurs extraits des rapports.

* Schéma du tableau de sortie (types de valeurs, bornes) ;
* Signalement des valeurs manquantes, par document.

Une valeur manquante n'est pas une erreur de traitement: tous les rapports
ne contiennent pas toutes les rubriques. Les signalements servent à repérer
un changement de mise en page qui ferait échouer l'extraction.
"""

import logging

import pandas as pd
import pandera.pandas as pa
from pandera.errors import SchemaErrors

from ond_delinquance.domain_knowledge.indicateurs import INDICATEURS

# colonnes de comptage (nombre de faits), qui ne peuvent pas être négatives
COUNT_COLUMNS = [
    f"{code}_{field}"
    for code in INDICATEURS
    for field in ("value_prior_year", "value_current_year", "cumulative")
]

SCHEMA_INDICATEURS = pa.DataFrameSchema(
    columns={
        "source_file": pa.Column(nullable=False),
        "error": pa.Column(nullable=True),
        "commune": pa.Column(nullable=True),
        "commune_key": pa.Column(nullable=True),
        "month": pa.Column(checks=pa.Check.in_range(1, 12), nullable=True),
        "month_label": pa.Column(nullable=True),
        "year": pa.Column(checks=pa.Check.in_range(1000, 9999), nullable=True),
        "population": pa.Column(checks=pa.Check.ge(0), nullable=True),
        "surface": pa.Column(checks=pa.Check.ge(0), nullable=True),
        "density": pa.Column(checks=pa.Check.ge(0), nullable=True),
        "general_faits_crime_rate": pa.Column(checks=pa.Check.ge(0), nullable=True),
    }
    | {col: pa.Column(checks=pa.Check.ge(0), nullable=True) for col in COUNT_COLUMNS},
    strict=False,
)

ERROR_KEYS = [
    "aucune_population",
    "aucun_fait",
    "aucun_cumul",
    "aucun_taux",
]


def validate_indicateurs(df: pd.DataFrame) -> pd.DataFrame:
    """Vérifie le tableau des indicateurs avec SCHEMA_INDICATEURS.

    Parameters
    ----------
    df: pd.DataFrame
        Tableau produit par `records_to_dataframe`.

    Returns
    -------
    df: pd.DataFrame
        Le même tableau, s'il est valide.

    Raises
    ------
    pandera.errors.SchemaError
        Si une colonne manque ou qu'une valeur est hors bornes.
    """
    return SCHEMA_INDICATEURS.validate(df)


def check_indicateurs(df: pd.DataFrame) -> bool:
    """Vérifie le tableau des indicateurs et signale les valeurs invalides.

    Toutes les erreurs sont collectées (validation "lazy") puis
    journalisées, sans interrompre l'export.

    Parameters
    ----------
    df: pd.DataFrame
        Tableau produit par `records_to_dataframe`.

    Returns
    -------
    is_valid: bool
        True si le tableau respecte SCHEMA_INDICATEURS.
    """
    try:
        SCHEMA_INDICATEURS.validate(df, lazy=True)
    except SchemaErrors as exc:
        logging.error(
            f"Tableau des indicateurs invalide: {len(exc.failure_cases)} erreur(s)\n"
            + f"{exc.failure_cases}"
        )
        return False
    return True


def error_population_manquante(df: pd.DataFrame) -> pd.DataFrame:
    """Signale les rapports dont la population n'a pu être extraite."""
    df["aucune_population"] = df["population"].isna().astype(int)
    return df


def error_faits_manquants(df: pd.DataFrame) -> pd.DataFrame:
    """Signale les rapports dont le nombre de faits constatés (N) n'a pu être extrait.

    Les causes les plus fréquentes sont un PDF sans couche texte, ou une
    mise en page qui sépare le libellé de ses valeurs de plus de la
    fenêtre de recherche.

    Parameters
    ----------
    df: pd.DataFrame
        DataFrame contenant les rapports.

    Returns
    -------
    df: pd.DataFrame
        DataFrame contenant avec une colonne indiquant si cette erreur est présente.
    """
    df["aucun_fait"] = df["general_faits_value_current_year"].isna().astype(int)
    return df


def error_cumul_manquant(df: pd.DataFrame) -> pd.DataFrame:
    """Signale les rapports dont le cumul annuel n'a pu être extrait."""
    df["aucun_cumul"] = df["general_faits_cumulative"].isna().astype(int)
    return df


def error_taux_manquant(df: pd.DataFrame) -> pd.DataFrame:
    """Signale les rapports dont le taux de criminalité n'a pu être extrait."""
    df["aucun_taux"] = df["general_faits_crime_rate"].isna().astype(int)
    return df


def flag_missing_indicators(df: pd.DataFrame) -> pd.DataFrame:
    """Ajoute les colonnes ERROR_KEYS aux rapports traités avec succès.

    Parameters
    ----------
    df: pd.DataFrame
        Tableau produit par `records_to_dataframe`.

    Returns
    -------
    df_ok: pd.DataFrame
        Copie des lignes sans erreur, avec une colonne 0/1 par clé de ERROR_KEYS.
    """
    df_ok = df[df["error"].isna()].copy()
    for fn_error in (
        error_population_manquante,
        error_faits_manquants,
        error_cumul_manquant,
        error_taux_manquant,
    ):
        df_ok = fn_error(df_ok)
    return df_ok


def report_missing_indicators(df: pd.DataFrame) -> pd.DataFrame:
    """Émet un warning par rapport dont des indicateurs généraux manquent.

    Parameters
    ----------
    df: pd.DataFrame
        Tableau produit par `records_to_dataframe`.

    Returns
    -------
    df_ok: pd.DataFrame
        Rapports traités avec succès, avec les colonnes ERROR_KEYS.
    """
    df_ok = flag_missing_indicators(df)
    for row in df_ok.itertuples():
        missing = [key for key in ERROR_KEYS if getattr(row, key)]
        if missing:
            logging.warning(f"{row.source_file}: {', '.join(missing)}")
    nb_docs = (df_ok[ERROR_KEYS].sum(axis=1) > 0).sum()
    logging.info(f"Rapports avec au moins un indicateur manquant: {nb_docs}/{len(df_ok)}")
    return df_ok
