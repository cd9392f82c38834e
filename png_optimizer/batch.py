"""Run-wide task queue and completion counters, owned by the coordinator."""
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from png_optimizer.conversion.models import ConversionTask


class TaskQueue:
    """FIFO of pending tasks. A task leaves the queue exactly once, when popped for a worker."""

    def __init__(self):
        self._tasks: deque[ConversionTask] = deque()
        self._outputs: set[Path] = set()

    def enqueue(self, task: ConversionTask) -> None:
        self._tasks.append(task)
        self._outputs.add(task.output_path)

    def claims_output(self, output_path: Path) -> bool:
        """True if a task queued earlier in this run already writes output_path."""
        return output_path in self._outputs

    def pop(self) -> Optional[ConversionTask]:
        if not self._tasks:
            return None
        return self._tasks.popleft()

    def __len__(self) -> int:
        return len(self._tasks)

    def __bool__(self) -> bool:
        return bool(self._tasks)

    def __iter__(self):
        return iter(list(self._tasks))


@dataclass
class RunState:
    """files_to_process is fixed once traversal is done; files_processed only grows."""

    files_to_process: int
    files_processed: int = 0

    @property
    def complete(self) -> bool:
        return self.files_processed == self.files_to_process

    def record_processed(self) -> None:
        if self.complete:
            raise RuntimeError("More results than tasks: %d already processed" % self.files_processed)
        self.files_processed += 1
