"""Port interfaces implemented by the adapters."""

from deptflow.ports.outbound import EsbPort, JobHandle, OrchestratorPort

__all__ = [
    "EsbPort",
    "JobHandle",
    "OrchestratorPort",
]
