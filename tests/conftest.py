# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import io

import pytest
from PIL import Image

from bloodwork_analysis.core.context import PatientContext, Sex
from bloodwork_analysis.core.reference_data import get_reference_data


@pytest.fixture
def sample_cbc_text():
    """Sample CBC report text as it comes out of OCR"""
    return """
    CITY DIAGNOSTIC LABORATORY
    Patient Name: Ahmed Khan Age: 45 Years Sex: Male

    COMPLETE BLOOD COUNT
    Test          Result      Unit        Reference Range
    Haemoglobin   14.2        g/dl        13.5 - 17.5
    WBC Count     7.5         x10^3/ul    4.5 - 11.0
    Platelet Count 2,50,000   /cumm       1,50,000 - 4,50,000
    MCV           88.0        fl          80 - 100
    """


@pytest.fixture
def sample_lipid_text():
    """Sample lipid report with SI units"""
    return """
    LIPID PROFILE
    Total Cholesterol : 5.2 mmol/L
    HDL Cholesterol : 1.1 mmol/L
    LDL Cholesterol : 3.4 mmol/L
    Triglycerides : 1.7 mmol/L
    """


@pytest.fixture
def male_patient():
    return PatientContext(age=45, sex=Sex.MALE)


@pytest.fixture
def female_patient():
    return PatientContext(age=30, sex=Sex.FEMALE)


@pytest.fixture
def store():
    """Process-wide reference data store"""
    return get_reference_data()


@pytest.fixture
def png_bytes():
    """Small white PNG with a dark band"""
    image = Image.new("RGB", (120, 40), (255, 255, 255))
    for x in range(10, 110):
        for y in range(15, 25):
            image.putpixel((x, y), (40, 40, 40))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def tesseract_data():
    """Factory for image_to_data style dicts, one Tesseract line per text line"""
    return make_tesseract_data


def make_tesseract_data(lines, confidence):
    data = {"text": [], "conf": [], "block_num": [], "par_num": [], "line_num": []}
    for line_number, line in enumerate(lines, start=1):
        for word in line.split():
            data["text"].append(word)
            data["conf"].append(confidence)
            data["block_num"].append(1)
            data["par_num"].append(1)
            data["line_num"].append(line_number)
    return data
