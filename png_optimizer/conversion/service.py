"""Optimized PNG encoding with Pillow and the per-task conversion run by pool workers."""
import logging
from pathlib import Path
from typing import Callable, Optional

from PIL import Image, features

from png_optimizer.conversion.models import ConversionResult, ConversionTask, PngOptions, TaskStatus

logger = logging.getLogger("optimizer.service")

DEFAULT_OPTIONS = PngOptions()

Encoder = Callable[[Path, Path, PngOptions], None]


def palette_colors(quality: int) -> int:
    """Palette size for a 0-100 quality, between 2 and 256 colours."""
    return max(2, min(256, round(256 * quality / 100)))


def _quantize_method(mode: str, effort: int) -> Image.Quantize:
    if effort >= 7 and features.check_feature("libimagequant"):
        return Image.Quantize.LIBIMAGEQUANT
    # Median cut only handles RGB
    if mode == "RGBA" or effort < 4:
        return Image.Quantize.FASTOCTREE
    return Image.Quantize.MEDIANCUT


def _normalize_mode(img: Image.Image) -> Image.Image:
    # Colour keys (tRNS on RGB/L) become real alpha; a quantized P image cannot carry a tuple key
    if "transparency" in img.info and img.mode not in ("RGBA", "P"):
        return img.convert("RGBA")
    if img.mode in ("RGB", "RGBA", "P"):
        return img
    has_alpha = img.mode in ("LA", "La", "PA", "RGBa")
    return img.convert("RGBA" if has_alpha else "RGB")


def encode_png(src: Path, dst: Path, options: PngOptions = DEFAULT_OPTIONS) -> None:
    """Decode any Pillow-readable image and write it to dst as a compressed PNG.

    Only the first frame of animated inputs is kept. Adaptive row filtering is
    left to the encoder, which picks a filter per row for truecolour output.
    """
    with Image.open(src) as img:
        work = _normalize_mode(img)
        if options.palette and work.mode in ("RGB", "RGBA"):
            work = work.quantize(
                colors=palette_colors(options.quality),
                method=_quantize_method(work.mode, options.effort),
                dither=Image.Dither.FLOYDSTEINBERG,
            )
        save_kw: dict = {"format": "PNG", "compress_level": options.compression_level}
        if options.effort >= 7:
            save_kw["optimize"] = True
        work.save(str(dst), **save_kw)


def file_size(path: Path, label: str) -> Optional[int]:
    """Size in bytes, or None when the file cannot be stat'ed."""
    try:
        return path.stat().st_size
    except OSError as e:
        logger.warning("Could not get %s size for %s: %s", label, path, e)
        return None


def to_kb(size: Optional[int]) -> Optional[float]:
    if size is None:
        return None
    return round(size / 1024, 2)


def savings_percentage(original: Optional[float], optimized: Optional[float]) -> Optional[float]:
    """Percentage saved, rounded to two decimals. None when either size is missing or the original is empty."""
    if original is None or optimized is None or original <= 0:
        return None
    return round((original - optimized) / original * 100, 2)


def convert_task(
    task: ConversionTask,
    options: PngOptions = DEFAULT_OPTIONS,
    encode: Encoder = encode_png,
) -> ConversionResult:
    """Convert one task. Codec failures become an error result; size lookups never fail the task."""
    original = file_size(task.input_path, "original")
    logger.info("Processing: %s -> %s", task.input_path, task.output_path)
    try:
        encode(task.input_path, task.output_path, options)
    except Exception as e:
        logger.debug("Conversion failed for %s", task.input_path, exc_info=True)
        return ConversionResult.failed(task, str(e) or type(e).__name__)
    optimized = file_size(task.output_path, "optimized")
    return ConversionResult(
        status=TaskStatus.COMPLETED,
        input_path=task.input_path,
        output_path=task.output_path,
        original_size_kb=to_kb(original),
        optimized_size_kb=to_kb(optimized),
        savings_percentage=savings_percentage(original, optimized),
    )
