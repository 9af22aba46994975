# ============================================================================
# src/bloodwork_analysis/constants/critical_values.py
# ============================================================================
"""
Critical Value Thresholds
- Values that require immediate medical attention
- A breach overrides the standard reference range
"""

CRITICAL_VALUES = {
    # Complete blood count
    "hemoglobin": {"low": 7.0, "high": 20.0},
    "wbc": {"low": 2.0, "high": 30.0},
    "platelets": {"low": 30, "high": 1000},
    "rbc": {"low": 2.5, "high": 7.0},

    # Glucose
    "fasting_glucose": {"low": 50, "high": 250},
    "random_glucose": {"low": 50, "high": 300},
    "hba1c": {"high": 10.0},

    # Lipids
    "total_cholesterol": {"high": 300},
    "ldl_cholesterol": {"high": 190},
    "hdl_cholesterol": {"low": 25},
    "triglycerides": {"high": 500},

    # Thyroid
    "tsh": {"low": 0.1, "high": 10.0},
    "free_t4": {"low": 0.4, "high": 3.0},
    "free_t3": {"low": 1.0, "high": 8.0},

    # Liver
    "alt": {"high": 200},
    "ast": {"high": 200},
    "total_bilirubin": {"high": 5.0},

    # Kidney
    "creatinine": {"high": 3.0},
    "bun": {"high": 100},
    "egfr": {"low": 30},

    # Cardiac
    "troponin_i": {"high": 0.4},
    "troponin_t": {"high": 0.1},

    # Inflammatory
    "crp": {"high": 50},
    "esr": {"high": 100},

    # Electrolytes
    "sodium": {"low": 125, "high": 155},
    "potassium": {"low": 2.5, "high": 6.0},
    "calcium": {"low": 7.0, "high": 12.0},

    # Coagulation
    "pt": {"high": 25},
    "inr": {"high": 4.0},
    "aptt": {"high": 60},
}
