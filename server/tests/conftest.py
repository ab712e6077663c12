import shutil
from pathlib import Path

import pytest
from PIL import Image

import main

BUNDLED_FONT = Path(__file__).resolve().parents[1] / "components" / "tpl" / "font.ttf"

GAI_SIZE = (1040, 620)
TRAI_SIZE = (1040, 640)


@pytest.fixture
def asset_dir(tmp_path):
    """Asset directory with the bundled font and two generated backgrounds.

    The "trai" background is grayscale so the RGBA normalisation path is exercised.
    """
    shutil.copy(BUNDLED_FONT, tmp_path / "font.ttf")
    Image.new("RGB", GAI_SIZE, color=(255, 255, 255)).save(tmp_path / "gai.jpg", format="JPEG")
    Image.new("L", TRAI_SIZE, color=230).save(tmp_path / "trai.jpg", format="JPEG")
    return tmp_path


@pytest.fixture
def client(asset_dir, monkeypatch):
    monkeypatch.setitem(main.app.config, "ASSET_DIR", str(asset_dir))
    monkeypatch.setitem(main.app.config, "HOST", "")
    main.app.config["TESTING"] = True
    return main.app.test_client()
