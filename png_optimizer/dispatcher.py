"""Coordinator: hands queued tasks to idle workers and detects when every task is accounted for."""
import logging
import queue
from typing import Optional

from png_optimizer.batch import RunState, TaskQueue
from png_optimizer.config import WORKER_COUNT, WORKER_POLL_INTERVAL
from png_optimizer.conversion.models import ConversionResult
from png_optimizer.conversion.service import convert_task
from png_optimizer.pool import Converter, WorkerPool, WorkerReport
from png_optimizer.reporter import Reporter

logger = logging.getLogger("optimizer.dispatcher")


class Coordinator:
    """Owns the task queue and run counters.

    Both are only touched from run(), which handles worker reports one at a
    time from a single result queue. A worker that fails or dies mid-task
    has that task recorded as an error (never requeued) and is replaced
    while tasks remain.
    """

    def __init__(
        self,
        tasks: TaskQueue,
        worker_count: int = WORKER_COUNT,
        reporter: Optional[Reporter] = None,
        convert: Converter = convert_task,
        poll_interval: float = WORKER_POLL_INTERVAL,
    ):
        self.tasks = tasks
        self.state = RunState(files_to_process=len(tasks))
        self.worker_count = worker_count
        self.reporter = reporter or Reporter()
        self.convert = convert
        self.poll_interval = poll_interval
        self.pool: Optional[WorkerPool] = None

    def run(self) -> RunState:
        if self.state.files_to_process == 0:
            logger.info("No images found to process.")
            return self.state
        results: "queue.Queue[WorkerReport]" = queue.Queue()
        self.pool = WorkerPool(self.worker_count, results, self.convert)
        try:
            self.pool.start()
            for worker_id in range(self.pool.size):
                if not self.assign_next(worker_id):
                    break
            while not self.state.complete:
                for report in self._receive(results):
                    self._handle(report)
        finally:
            self.pool.shutdown()
        return self.state

    def assign_next(self, worker_id: int) -> bool:
        """Bind the head of the queue to the worker. False when the queue is empty."""
        task = self.tasks.pop()
        if task is None:
            return False
        logger.debug("Assigning task for %s to worker %s.", task.input_path, worker_id)
        self.pool.assign(worker_id, task)
        return True

    def _receive(self, results: "queue.Queue[WorkerReport]") -> list[WorkerReport]:
        try:
            return [results.get(timeout=self.poll_interval)]
        except queue.Empty:
            pass
        dead = self.pool.dead_busy_slots()
        if not dead:
            return []
        # A worker posts its report before exiting, so anything it sent is already queued
        reports = []
        while True:
            try:
                reports.append(results.get_nowait())
            except queue.Empty:
                break
        reported = {r.worker_id for r in reports}
        for worker_id, task in dead:
            if worker_id in reported:
                continue
            logger.error("Worker %s exited while processing %s", worker_id, task.input_path)
            failed = ConversionResult.failed(task, "worker failure: worker exited unexpectedly")
            reports.append(WorkerReport(worker_id, failed, worker_alive=False))
        return reports

    def _handle(self, report: WorkerReport) -> None:
        task = self.pool.release(report.worker_id)
        if task is None or task.input_path != report.result.input_path:
            raise RuntimeError(f"Unexpected report from worker {report.worker_id} for {report.result.input_path}")
        self.state.record_processed()
        self.reporter.report(report.result)
        if self.tasks:
            if not report.worker_alive:
                self.pool.restart(report.worker_id)
            self.assign_next(report.worker_id)
        elif self.state.complete:
            logger.debug("All %s tasks accounted for", self.state.files_to_process)
