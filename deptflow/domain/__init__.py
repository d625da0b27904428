"""Catalogue, transforms and models for the department workflows."""

from deptflow.domain.catalog import DEPARTMENTS, TASKS, Department, Field, TaskSpec, get_department, tasks_for
from deptflow.domain.models import Deployment, Job, PendingTask, ProcessInstance
from deptflow.domain.stock import ReplenishmentPlan, plan_replenishment
from deptflow.domain.workflows import WORKFLOWS, Workflow

__all__ = [
    "DEPARTMENTS",
    "TASKS",
    "Department",
    "Field",
    "TaskSpec",
    "get_department",
    "tasks_for",
    "Deployment",
    "Job",
    "PendingTask",
    "ProcessInstance",
    "ReplenishmentPlan",
    "plan_replenishment",
    "WORKFLOWS",
    "Workflow",
]
