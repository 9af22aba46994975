# ============================================================================
# src/bloodwork_analysis/utils/text_normalizer.py
# ============================================================================
"""
Text Normalization Utilities

Cleans up OCR text before parameter extraction:
- Collapses horizontal whitespace, keeps line breaks
- Fixes ambiguous characters only inside numbers (O -> 0, l -> 1)
- Joins split decimals, converts decimal commas, drops thousands separators
- Removes stray brackets and quotes
- Canonicalizes unit abbreviations (gm/dl -> g/dL)
- Corrects a finite list of garbled domain terms, whole words only
"""

import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Unit spellings seen on lab reports -> canonical unit (keys lowercase, micro sign as "u")
UNIT_ALIASES = {
    # Mass concentration
    "g/dl": "g/dL",
    "gm/dl": "g/dL",
    "gms/dl": "g/dL",
    "gm%": "g/dL",
    "g%": "g/dL",
    "g/l": "g/L",
    "gm/l": "g/L",
    "mg/dl": "mg/dL",
    "mg%": "mg/dL",
    "mg/l": "mg/L",
    "ug/dl": "ug/dL",
    "mcg/dl": "ug/dL",
    "ng/dl": "ng/dL",
    "ng/ml": "ng/mL",
    "ng/l": "ng/L",
    "pg/ml": "pg/mL",

    # Molar concentration
    "mmol/l": "mmol/L",
    "mmol/mol": "mmol/mol",
    "umol/l": "umol/L",
    "nmol/l": "nmol/L",
    "pmol/l": "pmol/L",
    "meq/l": "mEq/L",

    # Counts
    "/ul": "/uL",
    "/cumm": "/uL",
    "cumm": "/uL",
    "/cmm": "/uL",
    "/mm3": "/uL",
    "cells/ul": "/uL",
    "cells/cumm": "/uL",
    "/cu mm": "/uL",
    "cu mm": "/uL",
    "cells/cu mm": "/uL",
    "10^3/ul": "10^3/uL",
    "10^3/mm3": "10^3/uL",
    "10^3/cumm": "10^3/uL",
    "k/ul": "10^3/uL",
    "thou/ul": "10^3/uL",
    "10^9/l": "10^9/L",
    "10^6/ul": "10^6/uL",
    "10^6/mm3": "10^6/uL",
    "10^6/cumm": "10^6/uL",
    "m/ul": "10^6/uL",
    "mill/cumm": "10^6/uL",
    "million/cumm": "10^6/uL",
    "10^12/l": "10^12/L",
    "lakh/cumm": "lakh/uL",
    "lakhs/cumm": "lakh/uL",
    "lakh/ul": "lakh/uL",

    # Red cell indices
    "fl": "fL",
    "pg": "pg",
    "%": "%",
    "l/l": "L/L",

    # Hormones, enzymes
    "miu/l": "mIU/L",
    "uiu/ml": "uIU/mL",
    "iu/ml": "IU/mL",
    "u/l": "U/L",
    "iu/l": "U/L",

    # Misc
    "ml/min/1.73m2": "mL/min/1.73m2",
    "ml/min": "mL/min/1.73m2",
    "mm/hr": "mm/hr",
    "mm/h": "mm/hr",
    "mm/1st": "mm/hr",
    "sec": "s",
    "secs": "s",
    "seconds": "s",
    "ratio": "ratio",
}

# Known OCR garbles of domain terms (whole words, case-insensitive)
DOMAIN_TERM_CORRECTIONS = {
    "haemoglobin": "hemoglobin",
    "hernoglobin": "hemoglobin",
    "hemogiobin": "hemoglobin",
    "hemoglobln": "hemoglobin",
    "hgd": "hgb",
    "haematocrit": "hematocrit",
    "hematocnt": "hematocrit",
    "rnch": "mch",
    "rnchc": "mchc",
    "rncv": "mcv",
    "wbo": "wbc",
    "rbo": "rbc",
    "plateiets": "platelets",
    "piatelets": "platelets",
    "platelats": "platelets",
    "plts": "platelets",
    "neutrophiis": "neutrophils",
    "neutrophlls": "neutrophils",
    "lymphocytcs": "lymphocytes",
    "iymphocytes": "lymphocytes",
    "eosinophiis": "eosinophils",
    "leucocytes": "leukocytes",
    "leucocyte": "leukocyte",
    "choiesterol": "cholesterol",
    "cholesteroi": "cholesterol",
    "triglycendes": "triglycerides",
    "trigiycerides": "triglycerides",
    "glucosc": "glucose",
    "giucose": "glucose",
    "creatinme": "creatinine",
    "creatimine": "creatinine",
    "bilirubm": "bilirubin",
    "hbalc": "hba1c",
}

_DOMAIN_TERM_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(term) for term in sorted(DOMAIN_TERM_CORRECTIONS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)

# Numeric-context fixes; every pattern is anchored on digits
NUMERIC_ARTIFACT_PATTERNS = [
    (re.compile(r"(?<=\d)[Oo](?=\d)"), "0"),              # 1O5 -> 105
    (re.compile(r"(?<![A-Za-z])[Oo](?=\.\d)"), "0"),       # O.5 -> 0.5
    (re.compile(r"(?<=\d)[lI](?=\d)"), "1"),               # 1l.2 -> 11.2
    (re.compile(r"(?<=\d)[lI](?=\.\d)"), "1"),             # 1l.5 -> 11.5
    (re.compile(r"(?<=\d) \.(?=\d)"), "."),                # 14 .2 -> 14.2
    (re.compile(r"(?<=\d)\. (?=\d)"), "."),                # 14. 2 -> 14.2
    (re.compile(r"(?<=\d),(?=\d{2},\d{3}(?!\d))"), ""),   # 1,50,000 -> 150,000
    (re.compile(r"(?<=\d),(?=\d{3}(?!\d))"), ""),          # 150,000 -> 150000
    (re.compile(r"(?<=\d),(?=\d{1,2}(?!\d))"), "."),       # 14,2 -> 14.2
]

# Scientific notation spellings for count units
EXPONENT_PATTERNS = [
    (re.compile(r"10([³⁶⁹])"), lambda m: "10^" + {"³": "3", "⁶": "6", "⁹": "9"}[m.group(1)]),
    (re.compile(r"10¹²"), lambda m: "10^12"),
    (re.compile(r"(?<=\()[xX×*]\s*(?=10\s*[\^*]\s*\d)"), lambda m: ""),
    (re.compile(r"(?<![A-Za-z(])[xX×*]\s*(?=10\s*[\^*]\s*\d)"), lambda m: " "),
    (re.compile(r"\b10\s*[\^*]\s*(\d{1,2})"), lambda m: "10^" + m.group(1)),
]

# "cu mm" and "cu. mm" printed as two tokens
SPLIT_CUBIC_MM = re.compile(r"(?<![A-Za-z])cu\.?\s*mm\b", re.IGNORECASE)

STRAY_PUNCTUATION = re.compile(r"[\[\]{}\"'`~]")
HORIZONTAL_WHITESPACE = re.compile(r"[ \t\f\v]+")
_TOKEN = re.compile(r"\S+")
_TOKEN_PARTS = re.compile(r"^([(]?)(.*?)([)\],;:.]?)$")


def canonical_unit(token: Optional[str]) -> Optional[str]:
    """
    Canonical spelling of a unit token, or None if it is not a known unit.

    Examples:
        "gm/dl" -> "g/dL"
        "x10^3/ul" -> "10^3/uL"
        "mmol/l" -> "mmol/L"
    """
    if not token:
        return None
    key = token.strip().lower().replace("µ", "u").replace("μ", "u")
    if key.startswith("x10"):
        key = key[1:]
    if key in UNIT_ALIASES:
        return UNIT_ALIASES[key]
    stripped = SPLIT_CUBIC_MM.sub("cumm", key.strip("().,;:"))
    return UNIT_ALIASES.get(stripped)


def normalize_whitespace(text: str) -> str:
    """Unify line endings and collapse runs of spaces; blank lines are dropped."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    cleaned = (HORIZONTAL_WHITESPACE.sub(" ", line).strip() for line in lines)
    return "\n".join(line for line in cleaned if line)


def fix_numeric_artifacts(line: str) -> str:
    for pattern, replacement in NUMERIC_ARTIFACT_PATTERNS:
        line = pattern.sub(replacement, line)
    return line


def normalize_exponents(line: str) -> str:
    for pattern, replacement in EXPONENT_PATTERNS:
        line = pattern.sub(replacement, line)
    return line


def remove_stray_punctuation(line: str) -> str:
    # Column separators become spaces; brackets and quotes go
    line = line.replace("|", " ")
    return STRAY_PUNCTUATION.sub("", line)


def join_split_units(line: str) -> str:
    return SPLIT_CUBIC_MM.sub("cumm", line)


def canonicalize_units(line: str) -> str:
    def _replace(match: "re.Match") -> str:
        token = match.group(0)
        prefix, core, suffix = _TOKEN_PARTS.match(token).groups()
        unit = canonical_unit(core)
        if unit is not None:
            return f"{prefix}{unit}{suffix}"
        return token

    return _TOKEN.sub(_replace, line)


def correct_domain_terms(line: str) -> str:
    return _DOMAIN_TERM_PATTERN.sub(lambda m: DOMAIN_TERM_CORRECTIONS[m.group(0).lower()], line)


def normalize_text(text: str) -> str:
    """
    Apply all bounded corrections, line by line.

    Line structure is preserved; the extractor depends on it.
    Percent signs are kept since they mark percentage units.
    """
    if not text:
        return ""

    lines = []
    for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        line = line.replace("µ", "u").replace("μ", "u")
        line = remove_stray_punctuation(line)
        line = normalize_exponents(line)
        line = HORIZONTAL_WHITESPACE.sub(" ", line).strip()
        line = fix_numeric_artifacts(line)
        line = correct_domain_terms(line)
        line = join_split_units(line)
        line = canonicalize_units(line)
        if line:
            lines.append(line)

    normalized = "\n".join(lines)
    logger.debug(f"Normalized {len(text)} chars into {len(lines)} lines")
    return normalized
