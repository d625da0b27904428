"""Terminal department workers: a human (or a simulation) answers each job."""

import asyncio
import random
from typing import Awaitable, Callable, Dict, Optional

from deptflow.adapters.camunda.client import CamundaClient
from deptflow.adapters.camunda.worker import ActiveJob, JobWorker, WorkerGroup
from deptflow.adapters.terminal.prompt import ask, banner, decision_box, format_output, task_box
from deptflow.config import CONFIG
from deptflow.domain.catalog import TASKS, TaskSpec, get_department, simulated_answers
from deptflow.domain.parsing import now_utc, to_bool
from deptflow.ports.outbound import OrchestratorPort

INTERACTIVE_ACTOR = "Interactive User"
SIMULATED_ACTOR = "Simulated Worker"

Answer = Callable[[str], Awaitable[str]]


class TerminalWorker:
    """Subscribes to every task type of one department.

    Interactive mode prompts on stdin; prompts for concurrent jobs are
    serialized so questions never interleave. Simulated mode answers each
    field with its default after a short delay.
    """

    def __init__(
        self,
        department: str,
        client: Optional[OrchestratorPort] = None,
        simulated: bool = False,
        answer: Answer = ask,
        delay_seconds: Optional[float] = None,
        approve: Optional[bool] = None,
        rng: Optional[random.Random] = None,
    ):
        self.department = get_department(department)
        self.client = client or CamundaClient()
        self.simulated = simulated
        self.answer = answer
        self.delay_seconds = CONFIG["simulated_delay_seconds"] if delay_seconds is None else delay_seconds
        self.approve = CONFIG["simulated_approve"] if approve is None else approve
        self.rng = rng
        self._prompt_lock = asyncio.Lock()
        self.group = WorkerGroup(
            [JobWorker(self.client, task_type, self.handle) for task_type in self.department.task_types]
        )

    @property
    def actor(self) -> str:
        return SIMULATED_ACTOR if self.simulated else INTERACTIVE_ACTOR

    async def collect(self, spec: TaskSpec) -> Dict[str, str]:
        inputs: Dict[str, str] = {}
        for f in spec.fields:
            if f.depends_on and not to_bool(inputs.get(f.depends_on)):
                continue
            if f.decision and spec.decision_question:
                print()
                print(decision_box(spec.decision_question))
            inputs[f.name] = await self.answer(f.prompt)
        return inputs

    async def handle(self, job: ActiveJob):
        spec = TASKS[job.type]
        details = [(label, job.variables.get(key)) for label, key in spec.shows]

        if self.simulated:
            print(task_box(spec.title, job.key, details))
            await asyncio.sleep(self.delay_seconds)
            inputs = simulated_answers(spec, self.approve)
        else:
            async with self._prompt_lock:
                print("\n")
                print(task_box(spec.title, job.key, details))
                print()
                inputs = await self.collect(spec)

        result = spec.result(job.variables, inputs, self.actor, now_utc(), self.rng)
        await job.complete(result)

        if spec.decision_variable:
            outcome = "APPROVED" if result.get(spec.decision_variable) else "REJECTED"
            print(f"\n   {'✅' if outcome == 'APPROVED' else '❌'} {spec.title}: {outcome}")
        else:
            print(f"\n   ✅ {spec.title} completed!")
        print(f"   📤 Output: {format_output(result)}")
        print("\n⏳ Waiting for next task...\n")

    def header(self) -> str:
        mode = "Simulated Worker" if self.simulated else "Interactive Worker"
        return banner(
            f"{self.department.icon} {self.department.name.upper()} - {mode}",
            [f"Job Types: {', '.join(self.department.task_types)}"],
        )

    async def run(self):
        print()
        print(self.header())
        print("\n⏳ Waiting for tasks...\n")
        await self.group.run()

    def stop(self):
        for worker in self.group.workers:
            worker.stop()
