"""Conversion task and result models."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from png_optimizer.config import (
    PNG_ADAPTIVE_FILTERING,
    PNG_COMPRESSION_LEVEL,
    PNG_EFFORT,
    PNG_PALETTE,
    PNG_QUALITY,
)


class TaskStatus(str, Enum):
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class ConversionTask:
    """One input file and the PNG path it is written to. Identity is the input path."""

    input_path: Path
    output_path: Path


@dataclass(frozen=True)
class PngOptions:
    quality: int = PNG_QUALITY
    compression_level: int = PNG_COMPRESSION_LEVEL
    effort: int = PNG_EFFORT
    palette: bool = PNG_PALETTE
    adaptive_filtering: bool = PNG_ADAPTIVE_FILTERING


@dataclass
class ConversionResult:
    """Outcome of one task. Sizes are kilobytes rounded to two decimals; None means not available."""

    status: TaskStatus
    input_path: Path
    output_path: Optional[Path] = None
    original_size_kb: Optional[float] = None
    optimized_size_kb: Optional[float] = None
    savings_percentage: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @classmethod
    def failed(cls, task: ConversionTask, error: str) -> "ConversionResult":
        return cls(status=TaskStatus.ERROR, input_path=task.input_path, error=error)
