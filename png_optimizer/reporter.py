"""Per-file outcome lines and the end-of-run summary."""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from png_optimizer.batch import RunState
from png_optimizer.conversion.models import ConversionResult, TaskStatus

logger = logging.getLogger("optimizer.reporter")

NOT_AVAILABLE = "N/A"


def fmt(value) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, (int, float)):
        return f"{value:.2f}"
    return str(value)


@dataclass
class RunSummary:
    files_to_process: int
    files_processed: int
    converted: int
    failed: int
    original_kb: float
    optimized_kb: float
    elapsed: float

    @property
    def savings_percentage(self) -> Optional[float]:
        if self.original_kb <= 0:
            return None
        return round((self.original_kb - self.optimized_kb) / self.original_kb * 100, 2)


class Reporter:
    """Logs one line per ConversionResult. Missing or odd fields render as N/A instead of raising."""

    def __init__(self):
        self.converted = 0
        self.failed = 0
        # Totals only cover files where both sizes are known
        self.original_kb = 0.0
        self.optimized_kb = 0.0
        self._started = time.monotonic()

    def report(self, result: ConversionResult) -> None:
        input_path = getattr(result, "input_path", None)
        if getattr(result, "status", None) == TaskStatus.COMPLETED:
            self.converted += 1
            original = getattr(result, "original_size_kb", None)
            optimized = getattr(result, "optimized_size_kb", None)
            if isinstance(original, (int, float)) and isinstance(optimized, (int, float)):
                self.original_kb += original
                self.optimized_kb += optimized
            logger.info(
                "Converted/Optimized: %s -> %s | Original: %sKB | Output: %sKB | Saved: %s%%",
                fmt(input_path),
                fmt(getattr(result, "output_path", None)),
                fmt(original),
                fmt(optimized),
                fmt(getattr(result, "savings_percentage", None)),
            )
        else:
            self.failed += 1
            logger.error("Error processing %s: %s", fmt(input_path), fmt(getattr(result, "error", None)))

    def finish(self, state: RunState) -> RunSummary:
        summary = RunSummary(
            files_to_process=state.files_to_process,
            files_processed=state.files_processed,
            converted=self.converted,
            failed=self.failed,
            original_kb=round(self.original_kb, 2),
            optimized_kb=round(self.optimized_kb, 2),
            elapsed=time.monotonic() - self._started,
        )
        if summary.files_to_process:
            logger.info(
                "Processed %s/%s files: %s converted, %s failed | Original: %sKB | Output: %sKB | Saved: %s%% | %.2fs",
                summary.files_processed,
                summary.files_to_process,
                summary.converted,
                summary.failed,
                fmt(summary.original_kb),
                fmt(summary.optimized_kb),
                fmt(summary.savings_percentage),
                summary.elapsed,
            )
        logger.info("Recursive image optimization and conversion to PNG completed.")
        return summary
