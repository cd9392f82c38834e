"""Shared test fixtures."""
from pathlib import Path

import pytest
from PIL import Image

from png_optimizer.batch import TaskQueue
from png_optimizer.conversion.models import ConversionResult, ConversionTask, TaskStatus

COLORS = {
    "RGB": ((200, 40, 90), (0, 0, 0)),
    "RGBA": ((10, 120, 240, 128), (0, 0, 0, 255)),
    "L": (128, 0),
}


def write_image(path: Path, mode: str = "RGB", size: tuple[int, int] = (32, 24)) -> Path:
    """Small image with a diagonal line so it is not a single flat colour."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fill, line = COLORS[mode]
    img = Image.new(mode, size, fill)
    for x in range(size[0]):
        img.putpixel((x, x % size[1]), line)
    img.save(path)
    return path


@pytest.fixture()
def sample_tree(tmp_path: Path) -> Path:
    """input/{a.png, sub/b.jpg, sub/c.txt}"""
    root = tmp_path / "input"
    write_image(root / "a.png", mode="RGBA")
    write_image(root / "sub" / "b.jpg")
    (root / "sub" / "c.txt").write_text("not an image")
    return root


def make_queue(count: int) -> TaskQueue:
    tasks = TaskQueue()
    for i in range(count):
        tasks.enqueue(ConversionTask(Path(f"in/{i}.jpg"), Path(f"out/{i}.png")))
    return tasks


def completed(task: ConversionTask) -> ConversionResult:
    return ConversionResult(status=TaskStatus.COMPLETED, input_path=task.input_path, output_path=task.output_path)
