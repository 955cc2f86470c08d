"""Tests de la validation des indicateurs extraits."""

import logging

import pandera.errors
import pytest

from ond_delinquance.process.export_data import records_to_dataframe
from ond_delinquance.process.parse_reports import process_files
from ond_delinquance.quality.validate_parses import (
    ERROR_KEYS,
    check_indicateurs,
    flag_missing_indicators,
    report_missing_indicators,
    validate_indicateurs,
)


FULL_TEXT = """Population * : 6 123 habitants
Nombre de faits constatés 27 36 +33 % (dont 5 fait(s)) 198
Taux de criminalité 4,4 ‰ 5,9 ‰
"""


def fake_extract(pdf_bytes, filename=None):
    return pdf_bytes.decode("utf-8")


@pytest.fixture
def df_data():
    records = process_files(
        [
            ("01_Saint_Alban_janvier2024.pdf", FULL_TEXT.encode("utf-8")),
            (
                "02_Saint_Alban_fevrier2024.pdf",
                "Nombre de faits constatés 12 15 +25 %".encode("utf-8"),
            ),
            ("rapport.pdf", b""),
        ],
        extract_text=fake_extract,
    )
    return records_to_dataframe(records)


def test_valid_table(df_data) -> None:
    assert validate_indicateurs(df_data) is not None


def test_month_out_of_range(df_data) -> None:
    df_data.loc[0, "month"] = 13
    with pytest.raises(pandera.errors.SchemaError):
        validate_indicateurs(df_data)


def test_negative_count(df_data) -> None:
    df_data.loc[0, "cbv_value_current_year"] = -1
    with pytest.raises(pandera.errors.SchemaError):
        validate_indicateurs(df_data)


def test_missing_column(df_data) -> None:
    with pytest.raises(pandera.errors.SchemaError):
        validate_indicateurs(df_data.drop(columns=["source_file"]))


def test_flag_missing_indicators(df_data) -> None:
    df_ok = flag_missing_indicators(df_data)
    # le fichier en erreur est écarté
    assert list(df_ok["source_file"]) == [
        "01_Saint_Alban_janvier2024.pdf",
        "02_Saint_Alban_fevrier2024.pdf",
    ]
    assert df_ok[ERROR_KEYS].values.tolist() == [[0, 0, 0, 0], [1, 0, 1, 1]]


def test_report_missing_indicators(df_data, caplog) -> None:
    with caplog.at_level(logging.INFO):
        report_missing_indicators(df_data)
    assert "02_Saint_Alban_fevrier2024.pdf: aucune_population, aucun_cumul, aucun_taux" in caplog.text
    assert "01_Saint_Alban_janvier2024.pdf:" not in caplog.text
    assert "1/2" in caplog.text


def test_check_valid_table(df_data) -> None:
    assert check_indicateurs(df_data)


def test_check_reports_all_invalid_values(df_data, caplog) -> None:
    df_data.loc[0, "month"] = 13
    df_data.loc[1, "population"] = -5
    with caplog.at_level(logging.ERROR):
        assert not check_indicateurs(df_data)
    assert "Tableau des indicateurs invalide" in caplog.text
    assert "month" in caplog.text
    assert "population" in caplog.text
