"""Tests de l'extraction du texte natif des PDF."""

import logging

import pytest

from ond_delinquance.errors import UnreadablePdfError
from ond_delinquance.preprocess import extract_native_text as ent
from ond_delinquance.preprocess.extract_native_text_pdfminer import (
    extract_native_text_pdfminer,
)


NOT_A_PDF = b"Ceci n'est pas un fichier PDF."


def test_pdfminer_unreadable() -> None:
    with pytest.raises(UnreadablePdfError, match="06_Saint_Alban_juin2024.pdf"):
        extract_native_text_pdfminer(NOT_A_PDF, filename="06_Saint_Alban_juin2024.pdf")


def test_unreadable_is_propagated() -> None:
    with pytest.raises(UnreadablePdfError):
        ent.extract_native_text(NOT_A_PDF, filename="x.pdf")


def test_unknown_backend() -> None:
    with pytest.raises(ValueError, match="inconnue"):
        ent.extract_native_text(NOT_A_PDF, backend="tesseract")


def test_empty_text_is_not_an_error(monkeypatch, caplog) -> None:
    monkeypatch.setattr(ent, "extract_native_text_pdfminer", lambda pdf_bytes, filename=None: "\f")
    with caplog.at_level(logging.WARNING):
        assert ent.extract_native_text(b"%PDF-1.4", filename="scan.pdf") == "\f"
    assert "Texte natif absent: scan.pdf" in caplog.text


def test_native_text(monkeypatch) -> None:
    monkeypatch.setattr(
        ent,
        "extract_native_text_pdfminer",
        lambda pdf_bytes, filename=None: "Nombre de faits constatés 27 36",
    )
    assert ent.extract_native_text(b"%PDF-1.4").startswith("Nombre de faits")
