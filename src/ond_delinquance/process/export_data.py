"""Mettre à plat les rapports analysés dans un tableau, une ligne par fichier.

Chaque indicateur publié donne une colonne par valeur, préfixée par son
code: "cbv_value_current_year", "general_faits_variation_percent" etc.
Les fichiers en échec n'ont que "source_file" et "error" renseignés.
"""

import pandas as pd

from ond_delinquance.domain_knowledge.indicateurs import INDICATEURS

# valeurs de chaque indicateur publié
DTYPE_INDICATOR_VALUES = {
    "value_prior_year": "Int64",  # valeur N-1
    "value_current_year": "Float64",  # valeur N (le taux n'est pas entier)
    "cumulative": "Int64",  # cumul annuel
    "variation_percent": "Int64",  # variation N-1 -> N, en %
}

# dtype de la table de sortie
DTYPE_DATA = (
    {
        "source_file": "string",  # nom du fichier PDF
        "error": "string",  # message d'erreur, vide si succès
        "commune": "string",
        "commune_key": "string",  # commune en minuscules, pour les doublons
        "month": "Int64",
        "month_label": "string",
        "year": "Int64",
        "population": "Int64",
        "surface": "Float64",  # km²
        "density": "Float64",  # hab./km²
    }
    | {
        f"{code}_{field}": dtype
        for code in INDICATEURS
        for field, dtype in DTYPE_INDICATOR_VALUES.items()
    }
    | {"general_faits_crime_rate": "Float64"}
)


def flatten_record(record: dict) -> dict:
    """Mettre à plat une entrée: les indicateurs deviennent des colonnes.

    Parameters
    ----------
    record: dict
        Entrée produite par `parse_report`.

    Returns
    -------
    row: dict
        Ligne de tableau, dont les clés sont celles de DTYPE_DATA.
    """
    row = {col: None for col in DTYPE_DATA}
    row.update({k: v for k, v in record.items() if k != "indicators" and k in row})
    for code, indicator in record.get("indicators", {}).items():
        for field, val in indicator.items():
            col = f"{code}_{field}"
            if col in row:
                row[col] = val
    return row


def records_to_dataframe(records: list[dict]) -> pd.DataFrame:
    """Créer le tableau typé des rapports analysés.

    Parameters
    ----------
    records: list[dict]
        Entrées produites par `process_files`.

    Returns
    -------
    df_data: pd.DataFrame
        Une ligne par fichier, colonnes et types de DTYPE_DATA.
    """
    df_data = pd.DataFrame.from_records(
        [flatten_record(x) for x in records], columns=list(DTYPE_DATA)
    )
    df_data = df_data.astype(dtype=DTYPE_DATA)
    return df_data
