# ============================================================================
# src/bloodwork_analysis/extractors/patterns.py
# ============================================================================
"""
Parameter Recognition Patterns

One pattern group per parameter. Each entry is a label regex (synonyms,
abbreviations, common report phrasings); the extractor wraps it into a
strict "label : value" form and a looser "label ... value" form.

Lookarounds keep neighbouring parameters apart:
- "Mean Corpuscular Hemoglobin" is MCH, not hemoglobin
- "Hb A1c" is HbA1c, not hemoglobin
- "HDL" inside "Non-HDL" is not HDL
"""

import re
from typing import Dict, List, Pattern

# Labels that require a value right after them (short tokens like "Na", "K")
_VALUE_FOLLOWS = r"(?=\s*[:=\-]|\s+\d)"

LABEL_PATTERNS: Dict[str, List[str]] = {
    # ------------------------------------------------------------------
    # Complete blood count
    # ------------------------------------------------------------------
    "wbc": [
        r"\bwbc\b(?:\s*count)?",
        r"\bw\.b\.c\b\.?",
        r"white\s+blood\s+cells?(?:\s+count)?",
        r"white\s+cell\s+count",
        r"\btlc\b",
        r"total\s+leu[ck]ocyte\s+count",
        r"(?<!absolute )\bleu[ck]ocytes?(?:\s+count)?",
        r"\btotal\s+count\b",
        r"\btc\b",
    ],
    "rbc": [
        r"\brbc\b(?:\s*count)?(?!\s+distribution)",
        r"\br\.b\.c\b\.?",
        r"red\s+blood\s+cells?(?:\s+count)?(?!\s+distribution)",
        r"red\s+cell\s+count",
        r"\berythrocytes?(?:\s+count)?(?!\s+sed)",
    ],
    "hemoglobin": [
        r"(?<!corpuscular )(?<!cell )(?<!glycated )(?<!glycosylated )\bhemoglobin\b(?!\s*a1c)(?!\s+conc)",
        r"\bhgb\b",
        r"\bhb\b(?!\s*a1c)",
    ],
    "hematocrit": [
        r"\bhematocrit\b",
        r"\bhct\b",
        r"\bpcv\b",
        r"packed\s+cell\s+volume",
    ],
    "mcv": [
        r"\bmcv\b",
        r"mean\s+corpuscular\s+volume",
        r"mean\s+cell\s+volume",
    ],
    "mch": [
        r"\bmch\b",
        r"mean\s+corpuscular\s+hemoglobin(?!\s+conc)",
        r"mean\s+cell\s+hemoglobin(?!\s+conc)",
    ],
    "mchc": [
        r"\bmchc\b",
        r"mean\s+corpuscular\s+hemoglobin\s+concentration",
        r"mean\s+cell\s+hemoglobin\s+concentration",
    ],
    "rdw": [
        r"\brdw(?:[\s-]*cv)?\b",
        r"red\s+(?:blood\s+)?cell\s+distribution\s+width",
    ],
    "platelets": [
        r"(?<!mean )\bplatelets?(?:\s+count)?(?!\s+(?:distribution|volume))",
        r"\bplt\b",
        r"\bthrombocytes?(?:\s+count)?",
    ],
    "neutrophils": [
        r"(?<!absolute )\bneutrophils?\b",
        r"\bneuts?\b",
        r"\bpolymorphs\b",
    ],
    "lymphocytes": [
        r"(?<!absolute )\blymphocytes?\b",
        r"\blymphs?\b",
    ],
    "monocytes": [
        r"(?<!absolute )\bmonocytes?\b",
        r"\bmonos?\b",
    ],
    "eosinophils": [
        r"(?<!absolute )\beosinophils?\b",
        r"\beos\b",
    ],
    "basophils": [
        r"(?<!absolute )\bbasophils?\b",
        r"\bbasos?\b",
    ],

    # ------------------------------------------------------------------
    # Lipid profile
    # ------------------------------------------------------------------
    "total_cholesterol": [
        r"total\s+cholesterol",
        r"cholesterol,?\s+total",
        r"serum\s+cholesterol",
        r"(?<!hdl )(?<!ldl )(?<!hdl-)(?<!ldl-)\bcholesterol\b(?!\s*/)(?!,?\s+(?:hdl|ldl))(?!\s+ratio)",
    ],
    "ldl_cholesterol": [
        r"\bldl\b(?:[\s-]*(?:cholesterol|c)\b)?(?!\s*/)",
        r"low\s+density\s+lipoprotein(?:\s+cholesterol)?",
    ],
    "hdl_cholesterol": [
        r"(?<!non-)(?<!non )(?<!/)(?<!/ )\bhdl\b(?:[\s-]*(?:cholesterol|c)\b)?(?!\s*/)(?!\s+ratio)",
        r"high\s+density\s+lipoprotein(?:\s+cholesterol)?",
    ],
    "triglycerides": [
        r"\btriglycerides?\b",
        r"\btg\b",
        r"\btrigs?\b",
    ],
    "non_hdl_cholesterol": [
        r"\bnon[\s-]?hdl\b(?:[\s-]*cholesterol)?",
    ],

    # ------------------------------------------------------------------
    # Glucose
    # ------------------------------------------------------------------
    "fasting_glucose": [
        r"fasting\s+(?:blood\s+|plasma\s+)?(?:glucose|sugar)",
        r"(?:glucose|sugar),?\s+fasting",
        r"\bfbs\b",
        r"\bfbg\b",
        r"\bfpg\b",
    ],
    "random_glucose": [
        r"random\s+(?:blood\s+|plasma\s+)?(?:glucose|sugar)",
        r"(?:glucose|sugar),?\s+random",
        r"\brbs\b",
        r"\brbg\b",
    ],
    "hba1c": [
        r"\bhba1c\b",
        r"\bhb\s*a1c\b",
        r"(?:hemoglobin|glycated\s+hemoglobin|glycosylated\s+hemoglobin)\s*a1c",
        r"glycated\s+hemoglobin",
        r"glycosylated\s+hemoglobin",
        r"\ba1c\b",
    ],
    "ogtt_2h": [
        r"\bogtt\b(?:\s*\(?\s*2\s*(?:hours?|hrs?|h)\s*\)?)?",
        r"\b2[\s-]*(?:hours?|hrs?|h)\s+(?:post[\s-]*prandial\s+)?(?:glucose|sugar)",
        r"post[\s-]*prandial\s+(?:blood\s+)?(?:glucose|sugar)",
        r"\bppbs\b",
    ],

    # ------------------------------------------------------------------
    # Thyroid
    # ------------------------------------------------------------------
    "tsh": [
        r"\btsh\b",
        r"thyroid\s+stimulating\s+hormone",
        r"\bthyrotropin\b",
    ],
    "free_t4": [
        r"\bfree\s*t\s*4\b",
        r"\bft4\b",
        r"free\s+thyroxine",
    ],
    "free_t3": [
        r"\bfree\s*t\s*3\b",
        r"\bft3\b",
        r"free\s+triiodothyronine",
    ],
    "total_t4": [
        r"total\s+t\s*4\b",
        r"(?<!free )\bt4\b(?:,?\s+total)?",
        r"(?<!free )\bthyroxine\b",
    ],
    "total_t3": [
        r"total\s+t\s*3\b",
        r"(?<!free )\bt3\b(?:,?\s+total)?",
        r"(?<!free )\btriiodothyronine\b",
    ],
    "anti_tpo": [
        r"\banti[\s-]*tpo\b(?:\s+antibod(?:y|ies))?",
        r"\btpo\s+antibod(?:y|ies)",
        r"thyroid\s+peroxidase\s+antibod(?:y|ies)",
    ],

    # ------------------------------------------------------------------
    # Kidney
    # ------------------------------------------------------------------
    "creatinine": [
        r"(?<!urine )\bcreatinine\b(?!\s+clearance)",
        r"\bcreat\b",
    ],
    "bun": [
        r"\bbun\b",
        r"blood\s+urea\s+nitrogen",
        r"urea\s+nitrogen",
    ],
    "egfr": [
        r"\begfr\b",
        r"estimated\s+gfr",
        r"\bgfr\b",
    ],

    # ------------------------------------------------------------------
    # Liver
    # ------------------------------------------------------------------
    "alt": [
        r"\balt\b(?:\s*sgpt)?",
        r"\bsgpt\b",
        r"alanine\s+(?:amino)?transferase",
    ],
    "ast": [
        r"\bast\b(?:\s*sgot)?",
        r"\bsgot\b",
        r"aspartate\s+(?:amino)?transferase",
    ],
    "alp": [
        r"\balp\b",
        r"\balk(?:aline)?\s+phos(?:phatase)?\b",
    ],
    "total_bilirubin": [
        r"total\s+bilirubin",
        r"bilirubin,?\s+total",
        r"\btbil\b",
        r"(?<!direct )(?<!indirect )\bbilirubin\b(?!,?\s+(?:direct|indirect|total))",
    ],
    "albumin": [
        r"(?<!micro)\balbumin\b(?!\s*/)",
        r"\balb\b",
    ],

    # ------------------------------------------------------------------
    # Cardiac
    # ------------------------------------------------------------------
    "troponin_i": [
        r"(?:hs[\s-]*)?troponin[\s-]*i\b",
        r"\bc?tni\b",
    ],
    "troponin_t": [
        r"(?:hs[\s-]*)?troponin[\s-]*t\b",
        r"\bc?tnt\b",
    ],

    # ------------------------------------------------------------------
    # Electrolytes
    # ------------------------------------------------------------------
    "sodium": [
        r"\bsodium\b",
        r"\bna\b\+?" + _VALUE_FOLLOWS,
    ],
    "potassium": [
        r"\bpotassium\b",
        r"\bk\b\+?" + _VALUE_FOLLOWS,
    ],
    "chloride": [
        r"\bchloride\b",
        r"\bcl\b-?" + _VALUE_FOLLOWS,
    ],
    "calcium": [
        r"(?<!ionized )(?<!ionised )\bcalcium\b",
        r"\bca\b" + _VALUE_FOLLOWS,
    ],

    # ------------------------------------------------------------------
    # Coagulation
    # ------------------------------------------------------------------
    "pt": [
        r"prothrombin\s+time",
        r"\bpt\b(?!\s*[/-]?\s*inr)(?!\s+name)",
    ],
    "inr": [
        r"\binr\b",
        r"international\s+normali[sz]ed\s+ratio",
    ],
    "aptt": [
        r"\ba?ptt\b",
        r"(?:activated\s+)?partial\s+thromboplastin\s+time",
    ],

    # ------------------------------------------------------------------
    # Inflammatory
    # ------------------------------------------------------------------
    "crp": [
        r"(?:hs[\s-]*)?\bcrp\b",
        r"c[\s-]*reactive\s+protein",
    ],
    "esr": [
        r"\besr\b",
        r"erythrocyte\s+sedimentation\s+rate",
        r"\bsed(?:imentation)?\s+rate\b",
    ],
}

# Numeric value: not part of a larger number, not an exponent base or power
VALUE = r"(?<![\d.^])(?P<value>\d+(?:\.\d+)?)(?![\d.]|\s*\^)"

# Optional bracketed unit or note between label and value, e.g. "WBC (10^3/uL)"
_BRACKETED = r"(?:\s*\([^)\n]{0,24}\))?"

# Gap allowed by the loose form: no digits except an exponent unit like 10^3
_LOOSE_GAP = r"(?:[^\d\n]|10\^\d{1,2}){0,30}?"

_SEPARATOR = r"\s*(?P<sep>[:=\-])?\s*"

# Reference range printed after the value, e.g. "13.5 - 17.5" or "4.5 to 11"
REFERENCE_RANGE = re.compile(
    r"(?<![\d.])(?P<low>\d+(?:\.\d+)?)\s*(?:-|–|—|to)\s*(?P<high>\d+(?:\.\d+)?)(?![\d.])",
    re.IGNORECASE,
)

# Demographics in report headers
AGE_PATTERN = re.compile(
    r"\bage\s*(?:/\s*sex\s*)?[:=\-]?\s*(?P<age>\d{1,3})\s*(?:y(?:ea)?rs?|y)?\b",
    re.IGNORECASE,
)
SEX_PATTERN = re.compile(
    r"\b(?:sex|gender)\s*[:=\-]?\s*(?P<sex>male|female|m|f)\b",
    re.IGNORECASE,
)
AGE_SEX_PATTERN = re.compile(
    r"\b(?P<age>\d{1,3})\s*(?:y(?:ea)?rs?|y)\s*[/,]\s*(?P<sex>male|female|m|f)\b",
    re.IGNORECASE,
)
NAME_PATTERN = re.compile(
    r"\b(?:patient\s*s?\s+name|patient|name)\s*[:=\-]\s*"
    r"(?P<name>[A-Za-z][A-Za-z.]*(?:\s[A-Za-z][A-Za-z.]*){0,4}?)"
    r"(?=\s+(?:age|sex|gender|dob|mr|id|ref)\b|\s*$)",
    re.IGNORECASE | re.MULTILINE,
)


def compile_parameter_patterns(parameter_id: str) -> List[Pattern]:
    """
    Ordered patterns for one parameter: every strict form, then every loose form.
    """
    labels = LABEL_PATTERNS.get(parameter_id, [])
    strict = [re.compile("(?P<label>" + label + ")" + _BRACKETED + _SEPARATOR + VALUE, re.IGNORECASE) for label in labels]
    loose = [re.compile("(?P<label>" + label + ")" + _LOOSE_GAP + VALUE, re.IGNORECASE) for label in labels]
    return strict + loose
