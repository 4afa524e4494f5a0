import os
from datetime import datetime
import pytest
from PIL import Image
from elite_shots.classifier import ScreenshotKind
from elite_shots.converter import convert_image
from elite_shots.exceptions import ConversionError
from elite_shots.templating import FileMetadataContext

def test_convert_image_writes_png_and_deletes_source(tmp_path, make_bmp):
    src = make_bmp(tmp_path / "Screenshot_0001.bmp", color=(1, 2, 3))
    dest = tmp_path / "out.png"

    assert convert_image(src, dest) == dest
    assert not src.exists()
    with Image.open(dest) as img:
        assert img.format == "PNG"
        assert img.size == (4, 3)
        assert img.convert("RGB").getpixel((0, 0)) == (1, 2, 3)

def test_write_failure_keeps_source(tmp_path, make_bmp, monkeypatch):
    src = make_bmp(tmp_path / "Screenshot_0001.bmp")
    dest = tmp_path / "out.png"

    def _fail(self, fp, format=None, **params):
        raise OSError("disk full")
    monkeypatch.setattr(Image.Image, "save", _fail)

    with pytest.raises(ConversionError) as excinfo:
        convert_image(src, dest)
    assert "disk full" in str(excinfo.value)
    assert src.exists()
    assert not dest.exists()

def test_existing_target_is_never_overwritten(tmp_path, make_bmp):
    src = make_bmp(tmp_path / "Screenshot_0001.bmp")
    dest = tmp_path / "out.png"
    dest.write_bytes(b"someone else's screenshot")

    with pytest.raises(ConversionError):
        convert_image(src, dest)
    assert src.exists()
    assert dest.read_bytes() == b"someone else's screenshot"

def test_unreadable_source_is_kept(tmp_path):
    src = tmp_path / "Screenshot_0001.bmp"
    src.write_text("not an image")
    dest = tmp_path / "out.png"

    with pytest.raises(ConversionError):
        convert_image(src, dest)
    assert src.exists()
    assert not dest.exists()

def test_second_conversion_of_same_source_fails(tmp_path, make_bmp):
    src = make_bmp(tmp_path / "Screenshot_0001.bmp")
    convert_image(src, tmp_path / "a.png")
    with pytest.raises(ConversionError):
        convert_image(src, tmp_path / "b.png")
    assert not (tmp_path / "b.png").exists()

def test_convert_live_names_from_template(converter, source_dir, output_dir, make_bmp):
    src = make_bmp(source_dir / "Screenshot_0001.bmp")
    rec = converter.convert_live(src, ScreenshotKind.STANDARD)

    assert rec.success
    dest = output_dir / os.path.basename(rec.destination)
    assert dest.exists()
    assert dest.name.endswith("-Jameson-Sol-Earth.png")
    assert not src.exists()
    assert converter.stats.total_converted == 1
    assert converter.stats.last_converted_file == rec.destination

def test_convert_highres_gets_suffix(converter, source_dir, output_dir, make_bmp):
    src = make_bmp(source_dir / "HighResScreenShot_2024-01-01_12-00-00.bmp")
    ctx = FileMetadataContext(datetime(2024, 1, 1, 12, 0, 0))
    rec = converter.convert(src, ScreenshotKind.HIGHRES, ctx)

    assert rec.success
    assert rec.destination == str(
        output_dir / "2024-01-01 12-00-00-unknown-unknown-unknown-highres.png"
    )

def test_same_name_twice_is_numbered(converter, source_dir, output_dir, make_bmp):
    ctx = FileMetadataContext(datetime(2024, 1, 1, 12, 0, 0))
    first = converter.convert(make_bmp(source_dir / "Screenshot_0001.bmp"), ScreenshotKind.STANDARD, ctx)
    second = converter.convert(make_bmp(source_dir / "Screenshot_0002.bmp"), ScreenshotKind.STANDARD, ctx)

    base = "2024-01-01 12-00-00-unknown-unknown-unknown"
    assert first.destination == str(output_dir / f"{base}.png")
    assert second.destination == str(output_dir / f"{base}_0001.png")

def test_failure_is_recorded_not_raised(converter, source_dir, caplog):
    src = source_dir / "Screenshot_0001.bmp"
    src.write_text("garbage")
    completed = []
    converter._on_complete = completed.append

    rec = converter.convert_live(src, ScreenshotKind.STANDARD)

    assert not rec.success
    assert rec.error
    assert src.exists()
    assert converter.stats.total_failed == 1
    assert completed == [rec]
    assert any(r.levelname == "ERROR" for r in caplog.records)

def test_success_is_logged(converter, source_dir, make_bmp, caplog):
    caplog.set_level("INFO")
    src = make_bmp(source_dir / "HighResScreenShot_2024-01-01_12-00-00.bmp")
    converter.convert_live(src, ScreenshotKind.HIGHRES)
    assert any(
        "Saved high resolution screenshot to" in r.getMessage() and r.getMessage().endswith("s).")
        for r in caplog.records
    )

def test_template_change_on_disk_applies_to_next_file(config, converter, source_dir, make_bmp):
    text = config.path.read_text(encoding="utf-8")
    config.path.write_text(text.replace("%datetime%-%cmdr%-%system%-%body%", "%cmdr%"), encoding="utf-8")
    st = config.path.stat()
    os.utime(config.path, (st.st_atime, st.st_mtime + 10))

    rec = converter.convert_live(make_bmp(source_dir / "Screenshot_0001.bmp"), ScreenshotKind.STANDARD)
    assert os.path.basename(rec.destination) == "Jameson.png"

def test_missing_output_directory_is_created(converter, config, tmp_path, source_dir, make_bmp):
    nested = tmp_path / "a" / "b"
    config.output_directory = nested
    config.save()
    rec = converter.convert_live(make_bmp(source_dir / "Screenshot_0001.bmp"), ScreenshotKind.STANDARD)
    assert rec.success
    assert os.path.dirname(rec.destination) == str(nested)
