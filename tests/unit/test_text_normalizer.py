# ============================================================================
# FILE: tests/unit/test_text_normalizer.py
# ============================================================================
"""
Unit tests for OCR text normalization
"""

import pytest

from bloodwork_analysis.utils.text_normalizer import (
    canonical_unit,
    correct_domain_terms,
    fix_numeric_artifacts,
    normalize_text,
    normalize_whitespace,
)


@pytest.mark.parametrize("raw,expected", [
    ("1O5", "105"),
    ("O.5", "0.5"),
    ("1l.2", "11.2"),
    ("14 .2", "14.2"),
    ("14. 2", "14.2"),
    ("14,2", "14.2"),
    ("150,000", "150000"),
    ("2,50,000", "250000"),
])
def test_numeric_artifacts(raw, expected):
    assert fix_numeric_artifacts(raw) == expected


def test_letters_outside_numbers_are_untouched():
    """O and l are only fixed between digits"""
    assert fix_numeric_artifacts("Blood Pool lO") == "Blood Pool lO"


@pytest.mark.parametrize("token,expected", [
    ("gm/dl", "g/dL"),
    ("G/DL", "g/dL"),
    ("x10^3/ul", "10^3/uL"),
    ("/cumm", "/uL"),
    ("/cu mm", "/uL"),
    ("cu mm", "/uL"),
    ("cells/cu mm", "/uL"),
    ("/cu.mm", "/uL"),
    ("mmol/l", "mmol/L"),
    ("µmol/L", "umol/L"),
    ("fl", "fL"),
    ("(mg/dl)", "mg/dL"),
    ("Hemoglobin", None),
    ("", None),
])
def test_canonical_unit(token, expected):
    assert canonical_unit(token) == expected


def test_domain_terms_whole_words_only():
    assert correct_domain_terms("Haemoglobin 14.2") == "hemoglobin 14.2"
    assert correct_domain_terms("RNCHC 33") == "mchc 33"
    assert correct_domain_terms("WBO Count") == "wbc Count"
    # Not a whole word, left alone
    assert correct_domain_terms("Hgdx") == "Hgdx"


def test_whitespace_keeps_lines():
    assert normalize_whitespace("a   b\r\n\r\n  c\td  ") == "a b\nc d"


def test_normalize_text_full_line():
    assert normalize_text("Haemoglobin | 1O.5 | gm/dl") == "hemoglobin 10.5 g/dL"


def test_normalize_text_scientific_units():
    assert normalize_text("WBC 7.5 x10³/µl") == "WBC 7.5 10^3/uL"
    assert normalize_text("WBC 7.5 x 10^3/ul") == "WBC 7.5 10^3/uL"


def test_normalize_text_joins_cubic_millimetre():
    assert normalize_text("WBC 7500 /cu mm") == "WBC 7500 /uL"
    assert normalize_text("WBC 7500 cells/cu. mm") == "WBC 7500 /uL"
    assert normalize_text("Platelets 2.5 lakhs/cu mm") == "Platelets 2.5 lakh/uL"


def test_normalize_text_keeps_bracketed_units():
    assert normalize_text("WBC (x10^3/ul) 7.5") == "WBC (10^3/uL) 7.5"


def test_normalize_text_strips_stray_punctuation():
    assert normalize_text('Platelets [L] "98"') == "Platelets L 98"


def test_normalize_text_keeps_percent():
    assert normalize_text("Neutrophils 65 %") == "Neutrophils 65 %"


def test_normalize_text_drops_blank_lines():
    assert normalize_text("\n\nMCV 88\n\n  \nMCH 29\n") == "MCV 88\nMCH 29"


def test_normalize_text_empty():
    assert normalize_text("") == ""
