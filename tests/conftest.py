import pytest
from PIL import Image
from elite_shots.config import Config
from elite_shots.converter import ScreenshotConverter
from elite_shots.values import KEY_BODY, KEY_CMDR, KEY_SHIPNAME, KEY_SYSTEM, StaticValues

@pytest.fixture
def source_dir(tmp_path):
    d = tmp_path / "Elite Dangerous"
    d.mkdir()
    return d

@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"

@pytest.fixture
def config(tmp_path, output_dir):
    """Returns a Config backed by a temp file, writing into output_dir."""
    cfg = Config(tmp_path / "config.json")
    cfg.output_directory = output_dir
    cfg.save()
    return cfg

@pytest.fixture
def values():
    return StaticValues({
        KEY_CMDR: "Jameson",
        KEY_SYSTEM: "Sol",
        KEY_BODY: "Earth",
        KEY_SHIPNAME: "Cobra",
    })

@pytest.fixture
def converter(config, values):
    return ScreenshotConverter(config, values)

@pytest.fixture
def make_bmp():
    """Returns a factory writing a small BMP image and returning its path."""
    def _make(path, color=(200, 40, 10), size=(4, 3)):
        Image.new("RGB", size, color).save(path, format="BMP")
        return path
    return _make
