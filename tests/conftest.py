"""
Shared test fixtures and path constants for font-family-parser tests.

All input file paths are defined here as module-level constants for
easy discovery and modification. If input files move or new ones are
added, update this file.
"""

from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Input file paths -- edit here if files move or new ones are added
# ---------------------------------------------------------------------------
INPUT_DIR = Path(__file__).resolve().parent / "inputs"

ROBOTO_FAMILY_XML = INPUT_DIR / "roboto_family.xml"
PROVIDER_FAMILY_XML = INPUT_DIR / "provider_family.xml"
PROVIDER_WITH_FONTS_XML = INPUT_DIR / "provider_with_fonts.xml"
NESTED_UNKNOWN_XML = INPUT_DIR / "nested_unknown.xml"
FONTS_CONFIG_YAML = INPUT_DIR / "fonts.yaml"

ANDROID_NS = "http://schemas.android.com/apk/res/android"
APP_NS = "http://schemas.android.com/apk/res-auto"


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against files in tests/inputs)",
    )
