import logging
from pathlib import Path

import pytest
from PIL import Image

from conftest import write_image
from png_optimizer.conversion.models import ConversionTask, PngOptions, TaskStatus
from png_optimizer.conversion.service import (
    convert_task,
    encode_png,
    file_size,
    palette_colors,
    savings_percentage,
    to_kb,
)


def test_savings_percentage() -> None:
    assert savings_percentage(100, 60) == 40.0
    assert savings_percentage(100, 130) == -30.0
    assert savings_percentage(3, 1) == 66.67


@pytest.mark.parametrize("original, optimized", [(0, 10), (None, 10), (100, None), (-5, 1)])
def test_savings_percentage_unavailable(original, optimized) -> None:
    assert savings_percentage(original, optimized) is None


def test_to_kb_rounds_to_two_decimals() -> None:
    assert to_kb(2048) == 2.0
    assert to_kb(1000) == 0.98
    assert to_kb(None) is None


def test_palette_colors_scales_with_quality() -> None:
    assert palette_colors(80) == 205
    assert palette_colors(100) == 256
    assert palette_colors(0) == 2


def test_file_size_missing_file_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    missing = tmp_path / "missing.png"

    assert file_size(missing, "original") is None
    assert f"Could not get original size for {missing}" in caplog.text


@pytest.mark.parametrize("mode, name", [("RGB", "photo.jpg"), ("RGBA", "icon.png"), ("L", "scan.tif")])
def test_encode_png_writes_palette_png(tmp_path: Path, mode: str, name: str) -> None:
    src = write_image(tmp_path / name, mode=mode)
    dst = tmp_path / "out.png"

    encode_png(src, dst)

    with Image.open(dst) as out:
        assert out.format == "PNG"
        assert out.mode == "P"
        assert out.size == (32, 24)


def test_encode_png_without_palette_keeps_truecolour(tmp_path: Path) -> None:
    src = write_image(tmp_path / "photo.jpg")
    dst = tmp_path / "out.png"

    encode_png(src, dst, PngOptions(palette=False, effort=1, compression_level=1))

    with Image.open(dst) as out:
        assert out.mode == "RGB"


def test_encode_png_keeps_first_frame_of_gif(tmp_path: Path) -> None:
    src = tmp_path / "anim.gif"
    frames = [Image.new("RGB", (8, 8), color) for color in ((255, 0, 0), (0, 255, 0))]
    frames[0].save(src, save_all=True, append_images=frames[1:])

    encode_png(src, tmp_path / "anim.png")

    with Image.open(tmp_path / "anim.png") as out:
        assert out.convert("RGB").getpixel((0, 0)) == (255, 0, 0)


def test_convert_task_reports_sizes_and_savings(tmp_path: Path) -> None:
    src = write_image(tmp_path / "photo.jpg", size=(64, 64))
    task = ConversionTask(src, tmp_path / "photo.png")

    result = convert_task(task)

    assert result.status == TaskStatus.COMPLETED
    assert result.ok
    assert result.output_path == task.output_path
    assert task.output_path.is_file()
    assert result.original_size_kb == round(src.stat().st_size / 1024, 2)
    assert result.optimized_size_kb == round(task.output_path.stat().st_size / 1024, 2)
    assert result.savings_percentage == savings_percentage(src.stat().st_size, task.output_path.stat().st_size)
    assert result.error is None


def test_convert_task_decode_failure_is_an_error_result(tmp_path: Path) -> None:
    src = tmp_path / "broken.png"
    src.write_bytes(b"definitely not a png")
    task = ConversionTask(src, tmp_path / "broken-out.png")

    result = convert_task(task)

    assert result.status == TaskStatus.ERROR
    assert result.input_path == src
    assert result.error
    assert result.optimized_size_kb is None


def test_convert_task_missing_output_size_is_not_an_error(tmp_path: Path) -> None:
    src = write_image(tmp_path / "photo.jpg")

    result = convert_task(ConversionTask(src, tmp_path / "never-written.png"), encode=lambda *args: None)

    assert result.status == TaskStatus.COMPLETED
    assert result.original_size_kb is not None
    assert result.optimized_size_kb is None
    assert result.savings_percentage is None


def test_convert_task_missing_input_size_is_not_an_error(tmp_path: Path) -> None:
    def fake_encode(src: Path, dst: Path, options: PngOptions) -> None:
        dst.write_bytes(b"x" * 2048)

    result = convert_task(ConversionTask(tmp_path / "gone.jpg", tmp_path / "gone.png"), encode=fake_encode)

    assert result.status == TaskStatus.COMPLETED
    assert result.original_size_kb is None
    assert result.optimized_size_kb == 2.0
    assert result.savings_percentage is None


def test_convert_task_uses_exception_type_when_message_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    def failing_encode(src: Path, dst: Path, options: PngOptions) -> None:
        raise ValueError()

    caplog.set_level(logging.DEBUG, logger="optimizer.service")
    result = convert_task(ConversionTask(tmp_path / "a.png", tmp_path / "b.png"), encode=failing_encode)

    assert result.error == "ValueError"


def test_convert_task_turns_rgb_colour_key_into_alpha(tmp_path: Path) -> None:
    src = tmp_path / "keyed.png"
    img = Image.new("RGB", (8, 8), (255, 0, 255))
    for x in range(8):
        img.putpixel((x, 4), (0, 128, 0))
    img.save(src, transparency=(255, 0, 255))
    task = ConversionTask(src, tmp_path / "keyed-out.png")

    result = convert_task(task)

    assert result.status == TaskStatus.COMPLETED
    with Image.open(task.output_path) as out:
        rgba = out.convert("RGBA")
        assert rgba.getpixel((0, 0))[3] == 0
        assert rgba.getpixel((3, 4)) == (0, 128, 0, 255)
