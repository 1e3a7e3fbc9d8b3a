"""Tests for the command line normalisation script."""

from __future__ import annotations

import importlib.util
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "normalize_image.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("normalize_image", SCRIPT_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_cli_writes_renamed_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "holiday.png"
    buffer = BytesIO()
    Image.new("RGB", (1600, 1200), color="olive").save(buffer, format="PNG")
    source.write_bytes(buffer.getvalue())

    _load_script().main([str(source), "--mime-type", "image/jpeg"])

    output = tmp_path / "holiday.jpg"
    with Image.open(output) as encoded:
        assert encoded.format == "JPEG"
        assert encoded.size == (1024, 768)
    assert "holiday.png -> holiday.jpg" in capsys.readouterr().out


def test_cli_leaves_non_images_alone(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("hello", encoding="utf-8")

    _load_script().main([str(source)])

    assert sorted(path.name for path in tmp_path.iterdir()) == ["notes.txt"]
    assert "left unchanged" in capsys.readouterr().out
