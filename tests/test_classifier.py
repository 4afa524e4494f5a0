import pytest
from elite_shots.classifier import (
    HIGHRES_PATTERN, STANDARD_PATTERN, ScreenshotKind, classify, match_kind,
)
from elite_shots.exceptions import ClassificationError

STANDARD_NAMES = ["Screenshot_0000.bmp", "Screenshot_0001.bmp", "Screenshot_9999.bmp"]
HIGHRES_NAMES = [
    "HighResScreenShot_2024-01-01_12-00-00.bmp",
    "HighResScreenShot_3307-12-31_23-59-59.bmp",
]
OTHER_NAMES = [
    "Screenshot_001.bmp",
    "Screenshot_00001.bmp",
    "screenshot_0001.bmp",
    "Screenshot_0001.png",
    "Screenshot_0001.bmp.tmp",
    "HighResScreenShot_2024-01-01.bmp",
    "HighResScreenshot_2024-01-01_12-00-00.bmp",
    "HighResScreenShot_2024-01-01_12-00-00xbmp",
    "notes.txt",
    "",
]

@pytest.mark.parametrize("name", STANDARD_NAMES)
def test_standard_names(name):
    assert classify(name) is ScreenshotKind.STANDARD

@pytest.mark.parametrize("name", HIGHRES_NAMES)
def test_highres_names(name):
    assert classify(name) is ScreenshotKind.HIGHRES

@pytest.mark.parametrize("name", OTHER_NAMES)
def test_other_names_are_rejected(name):
    with pytest.raises(ClassificationError) as excinfo:
        classify(name)
    assert "does not appear to be a screenshot" in str(excinfo.value)
    assert match_kind(name) is None

def test_patterns_are_mutually_exclusive():
    for name in STANDARD_NAMES + HIGHRES_NAMES + OTHER_NAMES:
        assert not (STANDARD_PATTERN.matches(name) and HIGHRES_PATTERN.matches(name))
