"""Job workers that long-poll the orchestrator and hand each job to a handler."""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from deptflow.config import CONFIG
from deptflow.domain.models import Job
from deptflow.ports.outbound import OrchestratorPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class JobAlreadyResolvedError(RuntimeError):
    pass


class ActiveJob:
    """A job in the hands of a handler.

    The handler resolves it once: ``complete`` reports the result variables,
    ``fail`` hands it back with one retry fewer, and ``forward`` keeps it
    open so another part of the process (a web form) can complete it later.
    """

    def __init__(self, job: Job, client: OrchestratorPort):
        self.job = job
        self._client = client
        self.state = "active"

    @property
    def key(self) -> str:
        return self.job.key

    @property
    def type(self) -> str:
        return self.job.type

    @property
    def variables(self) -> Dict[str, Any]:
        return self.job.variables

    @property
    def process_instance_key(self) -> Optional[str]:
        return self.job.process_instance_key

    @property
    def resolved(self) -> bool:
        return self.state in ("completed", "failed")

    def _check_open(self):
        if self.resolved:
            raise JobAlreadyResolvedError(f"Job {self.key} already {self.state}")

    async def complete(self, variables: Optional[Dict[str, Any]] = None) -> None:
        self._check_open()
        await self._client.complete_job(self.key, variables or {})
        self.state = "completed"

    def forward(self) -> None:
        self._check_open()
        self.state = "forwarded"

    async def fail(self, error_message: str) -> None:
        self._check_open()
        await self._client.fail_job(self.key, self.job.retries - 1, error_message)
        self.state = "failed"


JobHandler = Callable[[ActiveJob], Awaitable[None]]


class JobWorker:
    """Polls one task type and runs ``handler`` for each activated job, one at a time."""

    def __init__(
        self,
        client: OrchestratorPort,
        task_type: str,
        handler: JobHandler,
        worker_name: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        max_jobs: int = 1,
        poll_interval: Optional[float] = None,
        request_timeout_ms: Optional[int] = None,
    ):
        self.client = client
        self.task_type = task_type
        self.handler = handler
        self.worker_name = worker_name or CONFIG["worker_name"]
        self.timeout_ms = timeout_ms if timeout_ms is not None else CONFIG["job_timeout_ms"]
        self.max_jobs = max_jobs
        self.poll_interval = poll_interval if poll_interval is not None else CONFIG["poll_interval_seconds"]
        self.request_timeout_ms = request_timeout_ms
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self):
        self._running = False

    async def poll_once(self) -> int:
        """Activate and handle one batch. Returns how many jobs were handled."""
        jobs = await self.client.activate_jobs(
            self.task_type,
            self.worker_name,
            max_jobs=self.max_jobs,
            timeout_ms=self.timeout_ms,
            request_timeout_ms=self.request_timeout_ms,
        )
        for job in jobs:
            await self._handle(job)
        return len(jobs)

    async def run(self):
        self._running = True
        while self._running:
            try:
                handled = await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                _log(f"[{self.task_type}] job activation failed: {e}")
                await asyncio.sleep(self.poll_interval)
                continue
            if not handled and self._running:
                await asyncio.sleep(self.poll_interval)

    async def _handle(self, job: Job):
        active = ActiveJob(job, self.client)
        try:
            await self.handler(active)
        except Exception as e:
            _log(f"[{self.task_type}] job {job.key} failed: {e}")
            if active.resolved:
                return
            try:
                await active.fail(str(e))
            except Exception as fail_error:
                _log(f"[{self.task_type}] could not report failure for job {job.key}: {fail_error}")
            return
        if active.state == "active":
            _log(f"[{self.task_type}] handler left job {job.key} open; it will time out")


class WorkerGroup:
    """Runs several workers together and stops them together."""

    def __init__(self, workers: Optional[List[JobWorker]] = None):
        self.workers: List[JobWorker] = list(workers or [])
        self._tasks: List[asyncio.Task] = []

    def add(self, worker: JobWorker):
        self.workers.append(worker)

    def start(self) -> List[asyncio.Task]:
        """Schedule every worker on the running loop."""
        self._tasks = [asyncio.create_task(w.run(), name=f"worker:{w.task_type}") for w in self.workers]
        return self._tasks

    async def run(self):
        await asyncio.gather(*(w.run() for w in self.workers))

    async def stop(self):
        for w in self.workers:
            w.stop()
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
