"""Recursive directory scan that mirrors the input tree and queues convertible images."""
import logging
import os
from pathlib import Path
from typing import Optional

from png_optimizer.batch import TaskQueue
from png_optimizer.config import OUTPUT_EXTENSION, SUPPORTED_EXTENSIONS
from png_optimizer.conversion.models import ConversionTask

logger = logging.getLogger("optimizer.walker")


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def output_path_for(input_file: Path, output_dir: Path) -> Path:
    """Keep the file stem, always write .png."""
    return output_dir / (input_file.stem + OUTPUT_EXTENSION)


def ensure_directory(path: Path) -> None:
    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Created directory: %s", path)


def find_images(
    input_dir: Path,
    output_dir: Path,
    tasks: TaskQueue,
    output_root: Optional[Path] = None,
) -> TaskQueue:
    """Walk input_dir depth-first in listing order, appending one task per supported file.

    The output mirror of each directory is created before its entries are read.
    An output tree nested inside the input tree is never walked into.
    OSError from listing or creating directories propagates to the caller.
    """
    if output_root is None:
        output_root = output_dir.resolve()
    ensure_directory(output_dir)
    with os.scandir(input_dir) as it:
        entries = list(it)
    for entry in entries:
        input_path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            if input_path.resolve() == output_root:
                logger.info("Skipping output directory: %s", input_path)
                continue
            logger.info("Entering directory: %s", input_path)
            find_images(input_path, output_dir / entry.name, tasks, output_root)
        elif entry.is_file(follow_symlinks=False):
            if is_supported(input_path):
                output_path = output_path_for(input_path, output_dir)
                if tasks.claims_output(output_path):
                    logger.warning(
                        "Output %s is already claimed by another file, %s will overwrite it", output_path, input_path
                    )
                tasks.enqueue(ConversionTask(input_path, output_path))
            else:
                logger.info("Skipping (not a supported image format or directory): %s", input_path)
        else:
            logger.info("Skipping (not a regular file): %s", input_path)
    return tasks
