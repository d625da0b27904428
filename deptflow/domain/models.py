"""Jobs, process instances and pending dashboard tasks."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Job:
    """A unit of work activated from the orchestrator."""

    key: str
    type: str
    variables: Dict[str, Any] = field(default_factory=dict)
    process_instance_key: Optional[str] = None
    element_id: Optional[str] = None
    custom_headers: Dict[str, Any] = field(default_factory=dict)
    retries: int = 0
    deadline: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Job":
        return cls(
            key=str(data["jobKey"]),
            type=data.get("type", ""),
            variables=data.get("variables") or {},
            process_instance_key=_opt_str(data.get("processInstanceKey")),
            element_id=data.get("elementId"),
            custom_headers=data.get("customHeaders") or {},
            retries=int(data.get("retries") or 0),
            deadline=data.get("deadline"),
        )


@dataclass
class ProcessInstance:
    process_instance_key: str
    bpmn_process_id: str
    version: Optional[int] = None
    process_definition_key: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProcessInstance":
        return cls(
            process_instance_key=str(data["processInstanceKey"]),
            bpmn_process_id=data.get("processDefinitionId", ""),
            version=data.get("processDefinitionVersion"),
            process_definition_key=_opt_str(data.get("processDefinitionKey")),
        )


@dataclass
class Deployment:
    process_definition_key: str
    bpmn_process_id: str
    version: Optional[int] = None
    resource_name: Optional[str] = None


@dataclass
class PendingTask:
    """A job forwarded to a web UI and waiting for a human submission."""

    job: Any  # ActiveJob
    task_type: str
    received_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobKey": self.job.key,
            "variables": self.job.variables,
            "taskType": self.task_type,
            "receivedAt": self.received_at,
        }


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
