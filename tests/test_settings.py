import os
from pathlib import Path

import pytest

from finance_tracker.core import settings


def test_read_config_file(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "# comment line\n"
        "LOG_LEVEL: DEBUG  # inline comment\n"
        "OCR_LANG: 'deu'\n"
        "EMPTY:\n"
        "not a pair\n",
        encoding="utf-8",
    )

    assert settings.read_config_file(str(config)) == {"LOG_LEVEL": "DEBUG", "OCR_LANG": "deu"}
    assert settings.read_config_file(str(tmp_path / "missing.yaml")) == {}


def test_get_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORY_CACHE_SIZE", "250")
    assert settings.get_env_int("CATEGORY_CACHE_SIZE", 1000, min_value=1) == 250

    monkeypatch.setenv("CATEGORY_CACHE_SIZE", "lots")
    assert settings.get_env_int("CATEGORY_CACHE_SIZE", 1000, min_value=1) == 1000

    monkeypatch.setenv("CATEGORY_CACHE_SIZE", "0")
    assert settings.get_env_int("CATEGORY_CACHE_SIZE", 1000, min_value=1) == 1000


def test_get_env_float(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "12.5")
    assert settings.get_env_float("OCR_TIMEOUT_SECONDS", 30.0) == 12.5

    monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "-1")
    assert settings.get_env_float("OCR_TIMEOUT_SECONDS", 30.0, min_value=0.0) == 30.0


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("0", False), ("OFF", False), ("maybe", True)])
def test_get_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("CLEAR_CACHE_ON_RETRAIN", raw)
    assert settings.get_env_bool("CLEAR_CACHE_ON_RETRAIN", True) is expected


def test_config_file_does_not_override_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("OCR_LANG: fra\nTESSERACT_CMD: /usr/local/bin/tesseract\n")
    monkeypatch.setenv("CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("OCR_LANG", "eng")
    # Register the variable so monkeypatch removes it again afterwards.
    monkeypatch.setenv("TESSERACT_CMD", "placeholder")
    monkeypatch.delenv("TESSERACT_CMD")

    settings.load_environment()

    assert os.environ["OCR_LANG"] == "eng"
    assert os.environ["TESSERACT_CMD"] == "/usr/local/bin/tesseract"
