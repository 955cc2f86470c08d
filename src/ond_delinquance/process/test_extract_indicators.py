"""Tests de l'extraction des indicateurs à partir du texte des rapports."""

import pytest

from ond_delinquance.domain_knowledge.indicateurs import (
    DTYPE_RAW_INDICATORS,
    GROUPES,
    INDICATEURS,
    PlausibilityThresholds,
)
from ond_delinquance.process.extract_indicators import (
    build_indicator_records,
    extract_indicators,
    get_two_ints_after,
    is_plausible_pair,
    normalize_text,
    text_after,
    variation_pct,
)


# texte d'un rapport, tel que produit par l'extraction (retours à la ligne de mise en page)
SAMPLE_TEXT = """Population * : 6 123 habitants
Surface : 45,2 km²
Densité : 135 hab./km²
Nombre de faits constatés 27 36 +33 % (dont 5 fait(s)) 198
Taux de criminalité 4,4 ‰ 5,9 ‰
Coups et blessures volontaires (1, 2, 3) 4 6 +50 %
Menaces ou chantages (5) 2 1 -50 %
Vols simples (41, 42) 8 11 +38 %
Cambriolages de résidences principales 3 2 -33 %
Cambriolages de locaux industriels, commerciaux ou financiers 1 0 -100 %
Vols à la roulotte et d'accessoires 5 9 +80 %
Destructions et dégradations de véhicules privés (68) 2 3 +50 %
Incendies volontaires de biens publics 0 1 +
Infractions à la législation sur les stupéfiants constatées 4 2 -50 %
Atteintes à l'autorité (72, 73) 1 3 +200 %
"""


@pytest.fixture
def raw_ind() -> dict:
    return extract_indicators(SAMPLE_TEXT)


class TestNormalizeText:
    def test_single_line(self) -> None:
        assert normalize_text("Vols\n  simples\t(41,\n42)") == "Vols simples (41, 42)"

    def test_dashes_and_apostrophes(self) -> None:
        assert normalize_text("Atteintes à l’autorité 1 3 –50 %") == (
            "Atteintes à l'autorité 1 3 -50 %"
        )

    def test_none(self) -> None:
        assert normalize_text(None) == ""


class TestTextAfter:
    def test_window(self) -> None:
        assert text_after("abc 12 34 56", "abc", 6) == " 12 34"

    def test_first_occurrence(self) -> None:
        assert text_after("abc 1 abc 2", "abc", 2) == " 1"

    def test_absent(self) -> None:
        assert text_after("abc", "xyz", 10) is None


class TestPlausiblePair:
    @pytest.mark.parametrize(
        "val_n1,val_n,expected",
        [
            (4, 6, True),
            (0, 0, True),
            (200, 200, True),
            (201, 3, False),
            (3, 250, False),
            (41, 2, False),
            (26, 4, False),
            (25, 2, True),
            (41, 5, True),
        ],
    )
    def test_default_thresholds(self, val_n1: int, val_n: int, expected: bool) -> None:
        assert is_plausible_pair(val_n1, val_n) is expected

    def test_custom_thresholds(self) -> None:
        seuils = PlausibilityThresholds(max_count=500)
        assert is_plausible_pair(250, 12, seuils)


class TestTwoIntsAfter:
    def test_skips_implausible_pairs(self) -> None:
        txt = "Coups et blessures volontaires 250 12 + 41 2 + 4 6 +50 %"
        assert get_two_ints_after(txt, "Coups et blessures volontaires") == (4, 6)

    def test_index_numbers_are_not_pairs(self) -> None:
        txt = "Vols simples (41, 42) 8 11 +38 %"
        assert get_two_ints_after(txt, "Vols simples") == (8, 11)

    def test_delimiter_digit(self) -> None:
        assert get_two_ints_after("Menaces 12 15 25", "Menaces") == (12, 15)

    def test_single_number(self) -> None:
        assert get_two_ints_after("Menaces 7 faits", "Menaces") == (None, None)

    def test_custom_thresholds(self) -> None:
        txt = "Coups et blessures volontaires 250 12 + 4 6 +50 %"
        seuils = PlausibilityThresholds(max_count=500)
        assert get_two_ints_after(txt, "Coups et blessures volontaires", seuils=seuils) == (
            250,
            12,
        )

    def test_outside_window(self) -> None:
        txt = "Menaces ou chantages " + "." * 200 + " 2 1 -50 %"
        assert get_two_ints_after(txt, "Menaces ou chantages") == (None, None)


class TestExtractIndicators:
    def test_admin_metadata(self, raw_ind: dict) -> None:
        assert raw_ind["population"] == 6123
        assert raw_ind["surface"] == pytest.approx(45.2)
        assert raw_ind["densite"] == pytest.approx(135.0)

    def test_general_block(self, raw_ind: dict) -> None:
        assert raw_ind["facts_prior_year"] == 27
        assert raw_ind["facts_current_year"] == 36
        assert raw_ind["cumulative_ytd"] == 198
        assert raw_ind["crime_rate"] == pytest.approx(5.9)

    def test_categories(self, raw_ind: dict) -> None:
        assert {code: raw_ind[code] for code in list(DTYPE_RAW_INDICATORS)[7:]} == {
            "cbv": 6,
            "menaces": 1,
            "vols_simples": 11,
            "camb_resid": 2,
            "camb_pro": 0,
            "roulotte": 9,
            "destruc_veh": 3,
            "incendies": 1,
            "stupef": 2,
            "autorite": 3,
        }

    def test_key_order(self, raw_ind: dict) -> None:
        assert list(raw_ind) == list(DTYPE_RAW_INDICATORS)

    @pytest.mark.parametrize("raw_text", ["", None, "Rapport sans données"])
    def test_empty_text(self, raw_text) -> None:
        raw_ind = extract_indicators(raw_text)
        assert list(raw_ind) == list(DTYPE_RAW_INDICATORS)
        assert all(val is None for val in raw_ind.values())

    def test_only_implausible_pairs(self) -> None:
        raw_ind = extract_indicators("Menaces ou chantages 300 250 % 41 2 +")
        assert raw_ind["menaces"] is None

    def test_camb_pro_alternative_label(self) -> None:
        txt = "Cambriolages de lieux à usage professionnelle, publique ou associative 12 15 +"
        assert extract_indicators(txt)["camb_pro"] == 15

    def test_single_value_fallbacks(self) -> None:
        raw_ind = extract_indicators("Coups et blessures : 7\nCambriolages de résidences 5")
        assert raw_ind["cbv"] == 7
        assert raw_ind["camb_resid"] == 5

    def test_large_monthly_totals(self) -> None:
        raw_ind = extract_indicators("Nombre de faits constatés 250 312 +25 %")
        assert raw_ind["facts_prior_year"] == 250
        assert raw_ind["facts_current_year"] == 312

    def test_oversized_numbers_are_absent(self) -> None:
        raw_ind = extract_indicators(
            "Population : 123456789012 habitants\n"
            "Nombre de faits constatés 99999999999999999999 3 +\n"
            "Coups et blessures : 99999999999999999999"
        )
        assert raw_ind["population"] is None
        assert raw_ind["facts_prior_year"] is None
        assert raw_ind["facts_current_year"] == 3
        assert raw_ind["cbv"] is None

    @pytest.mark.parametrize("padding,expected", [(240, (12, 34)), (256, (None, None))])
    def test_facts_window_includes_label(self, padding: int, expected: tuple) -> None:
        raw_ind = extract_indicators("Nombre de faits constatés" + "." * padding + " 12 34")
        assert (raw_ind["facts_prior_year"], raw_ind["facts_current_year"]) == expected

    def test_cumulative_fallback(self) -> None:
        raw_ind = extract_indicators("Nombre de faits constatés 27 36 +33 %\nCumul 2024 87")
        assert raw_ind["cumulative_ytd"] == 87

    def test_crime_rate_requires_both_values(self) -> None:
        assert extract_indicators("Taux de criminalité 4,4 ‰")["crime_rate"] is None


class TestVariationPct:
    @pytest.mark.parametrize(
        "val_n1,val_n,expected",
        [
            (27, 36, 33),
            (10, 8, -20),
            (8, 9, 13),
            (8, 7, -12),
            (5, 5, 0),
            (0, 5, None),
            (None, 3, None),
            (3, None, None),
        ],
    )
    def test_variation(self, val_n1, val_n, expected) -> None:
        assert variation_pct(val_n1, val_n) == expected


def test_catalogue_groups() -> None:
    assert {ind_def.category for ind_def in INDICATEURS.values()} == set(GROUPES)
    assert len(INDICATEURS) == 12


class TestBuildIndicatorRecords:
    def test_table(self, raw_ind: dict) -> None:
        indicators = build_indicator_records(raw_ind)
        assert list(indicators) == list(INDICATEURS)
        assert indicators["general_faits"] == {
            "label": "Faits constatés",
            "category": "Général",
            "value_prior_year": 27,
            "value_current_year": 36,
            "cumulative": 198,
            "variation_percent": 33,
            "crime_rate": pytest.approx(5.9),
        }
        assert indicators["general_taux"]["label"] == "Taux criminalité (‰)"
        assert indicators["general_taux"]["value_current_year"] == pytest.approx(5.9)
        assert indicators["camb_pro"] == {
            "label": "Cambriolages locaux pro.",
            "category": "Cambriolages",
            "value_prior_year": None,
            "value_current_year": 0,
            "cumulative": None,
            "variation_percent": None,
        }

    def test_missing_values(self) -> None:
        indicators = build_indicator_records(extract_indicators(""))
        assert len(indicators) == 12
        assert all(ind["value_current_year"] is None for ind in indicators.values())
        assert indicators["general_faits"]["variation_percent"] is None
        assert indicators["general_faits"]["crime_rate"] is None
