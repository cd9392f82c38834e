"""Command-line entry point. Takes no flags; paths and pool size come from configuration."""
import sys
from pathlib import Path

from png_optimizer.batch import TaskQueue
from png_optimizer.config import INPUT_DIR, OUTPUT_DIR, WORKER_COUNT, logger
from png_optimizer.conversion.service import convert_task
from png_optimizer.dispatcher import Coordinator
from png_optimizer.pool import Converter
from png_optimizer.reporter import Reporter, RunSummary
from png_optimizer.walker import find_images


def run(
    input_dir: Path = INPUT_DIR,
    output_dir: Path = OUTPUT_DIR,
    worker_count: int = WORKER_COUNT,
    convert: Converter = convert_task,
) -> RunSummary:
    """Scan the whole input tree first, then convert everything found on the worker pool."""
    logger.info("Starting recursive image optimization and conversion to PNG...")
    reporter = Reporter()
    tasks = find_images(Path(input_dir), Path(output_dir), TaskQueue())
    logger.info("Found %s images to process.", len(tasks))
    state = Coordinator(tasks, worker_count=worker_count, reporter=reporter, convert=convert).run()
    return reporter.finish(state)


def main() -> int:
    try:
        run()
    except Exception:
        logger.exception("An unhandled error occurred during processing")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
