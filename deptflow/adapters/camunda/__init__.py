"""Camunda 8 REST client and job workers."""

from deptflow.adapters.camunda.client import CamundaClient, OrchestratorError
from deptflow.adapters.camunda.worker import ActiveJob, JobWorker, WorkerGroup

__all__ = [
    "CamundaClient",
    "OrchestratorError",
    "ActiveJob",
    "JobWorker",
    "WorkerGroup",
]
