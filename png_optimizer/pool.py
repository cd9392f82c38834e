"""Fixed-size pool of worker threads, each fed one task at a time through a private inbox."""
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from png_optimizer.conversion.models import ConversionResult, ConversionTask

logger = logging.getLogger("optimizer.pool")

Converter = Callable[[ConversionTask], ConversionResult]

_STOP = object()


@dataclass
class WorkerReport:
    """Message from a worker to the coordinator: one result per task."""

    worker_id: int
    result: ConversionResult
    worker_alive: bool = True


class Worker(threading.Thread):
    """Runs conversions sequentially. Shares nothing with the coordinator except its two queues."""

    def __init__(self, worker_id: int, results: "queue.Queue[WorkerReport]", convert: Converter):
        super().__init__(name=f"png-worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self._results = results
        self._convert = convert
        self._inbox: queue.Queue = queue.Queue(maxsize=1)

    def submit(self, task: ConversionTask) -> None:
        """Raises queue.Full if the previous task was not picked up yet."""
        self._inbox.put_nowait(task)

    def stop(self) -> None:
        self._inbox.put(_STOP)

    def run(self) -> None:
        while True:
            task = self._inbox.get()
            if task is _STOP:
                return
            try:
                result = self._convert(task)
            except Exception as e:
                logger.exception("Worker %s failed on %s", self.worker_id, task.input_path)
                failed = ConversionResult.failed(task, f"worker failure: {e}")
                self._results.put(WorkerReport(self.worker_id, failed, worker_alive=False))
                return
            self._results.put(WorkerReport(self.worker_id, result))


@dataclass
class WorkerSlot:
    worker: Worker
    task: Optional[ConversionTask] = None

    @property
    def busy(self) -> bool:
        return self.task is not None


class WorkerPool:
    """Worker slots indexed by worker id. Only the coordinator calls into the pool."""

    def __init__(self, size: int, results: "queue.Queue[WorkerReport]", convert: Converter):
        if size < 1:
            raise ValueError(f"Worker pool size must be at least 1, got {size}")
        self.size = size
        self._results = results
        self._convert = convert
        self.slots: list[WorkerSlot] = []

    def _spawn(self, worker_id: int) -> Worker:
        worker = Worker(worker_id, self._results, self._convert)
        worker.start()
        return worker

    def start(self) -> None:
        for worker_id in range(self.size):
            self.slots.append(WorkerSlot(self._spawn(worker_id)))
        logger.info("Initialized %s worker threads.", self.size)

    def assign(self, worker_id: int, task: ConversionTask) -> None:
        slot = self.slots[worker_id]
        if slot.busy:
            raise RuntimeError(f"Worker {worker_id} is still busy with {slot.task.input_path}")
        slot.task = task
        slot.worker.submit(task)

    def release(self, worker_id: int) -> Optional[ConversionTask]:
        slot = self.slots[worker_id]
        task, slot.task = slot.task, None
        return task

    def restart(self, worker_id: int) -> None:
        """Replace a worker that exited. Its slot must already be released."""
        self.slots[worker_id].worker = self._spawn(worker_id)
        logger.warning("Restarted worker %s", worker_id)

    def dead_busy_slots(self) -> list[tuple[int, ConversionTask]]:
        return [
            (worker_id, slot.task)
            for worker_id, slot in enumerate(self.slots)
            if slot.busy and not slot.worker.is_alive()
        ]

    def shutdown(self) -> None:
        """Ask every live worker to stop after its current task, then wait for all of them."""
        for slot in self.slots:
            if slot.worker.is_alive():
                slot.worker.stop()
        for slot in self.slots:
            slot.worker.join()
        logger.debug("Worker pool shut down")
