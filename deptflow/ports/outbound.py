"""Protocols the adapters implement for the orchestrator, jobs and ESBs."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from deptflow.domain.models import Deployment, Job, ProcessInstance


@runtime_checkable
class OrchestratorPort(Protocol):
    """Interface for the hosted workflow engine."""

    async def create_process_instance(
        self, process_id: str, variables: Optional[Dict[str, Any]] = None
    ) -> ProcessInstance: ...

    async def activate_jobs(
        self,
        task_type: str,
        worker: str,
        max_jobs: int = 1,
        timeout_ms: Optional[int] = None,
        request_timeout_ms: Optional[int] = None,
    ) -> List[Job]: ...

    async def complete_job(self, job_key: str, variables: Optional[Dict[str, Any]] = None) -> None: ...

    async def fail_job(self, job_key: str, retries: int, error_message: str) -> None: ...

    async def deploy_resource(self, path: str) -> List[Deployment]: ...


@runtime_checkable
class JobHandle(Protocol):
    """A job handed to a handler; resolved exactly once."""

    key: str
    type: str
    variables: Dict[str, Any]

    async def complete(self, variables: Optional[Dict[str, Any]] = None) -> None: ...

    def forward(self) -> None: ...

    async def fail(self, error_message: str) -> None: ...


@runtime_checkable
class EsbPort(Protocol):
    """Interface for the ESB transform services."""

    async def call(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]: ...

    async def check_health(self, esb: str) -> Dict[str, Any]: ...
